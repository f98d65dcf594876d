"""
Path codec.

Encodes a document path into an origin string and back. The encoded form is
the path marker followed by a compact JSON array of the segments:

    >>> encode_path(("a", 1))
    'path:["a",1]'
    >>> decode_path('path:["a",1]')
    ('a', 1)

Decoding is safe on any string a term's origin might hold. Strings without
the marker, or with a payload that is not a well-formed path, decode to
``None``.
"""

from __future__ import annotations

import json as _json
import typing as _typing

import covertrace.constants as _constants
import covertrace.paths as paths


class PathEncodeError(ValueError):
    """Raised when a path contains a segment that cannot be encoded."""

    def __init__(self, path: _typing.Sequence[_typing.Any], reason: str) -> None:
        self.path = tuple(path)
        super().__init__(f"cannot encode path {self.path!r}: {reason}")


def encode_path(path: _typing.Sequence[_typing.Any]) -> str:
    """
    Encode a path as a tagged origin string.

    Args:
        path: Sequence of ``str`` keys and non-negative ``int`` indices.

    Returns:
        ``"path:"`` followed by the JSON array of segments.

    Raises:
        PathEncodeError: If a segment is not a ``str`` or a non-negative
            ``int``. A document must never end up carrying a wrong tag.
    """
    for segment in path:
        if isinstance(segment, bool) or not isinstance(segment, (int, str)):
            raise PathEncodeError(path, f"segment {segment!r} is not a key or index")
        if isinstance(segment, int) and segment < 0:
            raise PathEncodeError(path, f"negative index {segment}")

    try:
        payload = _json.dumps(list(path), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise PathEncodeError(path, str(e)) from e

    return _constants.PATH_MARKER + payload


def decode_path(encoded: _typing.Any) -> paths.Path | None:
    """
    Decode a tagged origin string back into a path.

    Args:
        encoded: Any value; typically ``Term.location.file``.

    Returns:
        The decoded path, or None if ``encoded`` is not a string, lacks the
        marker, or its payload is not a JSON array of keys and indices.
    """
    if not isinstance(encoded, str) or not encoded.startswith(_constants.PATH_MARKER):
        return None

    payload = encoded[len(_constants.PATH_MARKER):]
    try:
        raw = _json.loads(payload)
    except (ValueError, RecursionError):
        return None

    if not isinstance(raw, list):
        return None

    try:
        return paths.coerce_path(raw)
    except paths.UnsupportedSegmentError:
        return None
