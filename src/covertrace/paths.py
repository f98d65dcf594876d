"""
Path and path segment types.

A path locates a node inside a nested document. Each segment is either an
array index (a non-negative ``int``) or an object key (a ``str``). The empty
path denotes the document root.

Paths are plain tuples so they hash, compare and sort like any other value:

    >>> coerce_path(["a", 1.0, "b"])
    ('a', 1, 'b')
"""

from __future__ import annotations

import math as _math
import typing as _typing

Segment: _typing.TypeAlias = int | str
"""A single step into a document: array index or object key."""

Path: _typing.TypeAlias = tuple[Segment, ...]
"""An ordered sequence of segments. ``()`` is the document root."""

ROOT: Path = ()


class UnsupportedSegmentError(TypeError):
    """Raised when a value cannot be used as a path segment."""

    def __init__(self, segment: _typing.Any) -> None:
        self.segment = segment
        super().__init__(
            f"unsupported path segment {segment!r} ({type(segment).__name__})"
        )


def coerce_segment(value: _typing.Any) -> Segment:
    """
    Normalize a raw value into a path segment.

    Strings are object keys. Integers are array indices. Floats, which is how
    generic JSON decoders hand back numbers, are truncated toward zero
    (``2.7 -> 2``), never rounded.

    Args:
        value: Raw segment value.

    Returns:
        The segment as ``int`` or ``str``.

    Raises:
        UnsupportedSegmentError: For booleans, ``None``, negative or
            non-finite numbers and any other type.
    """
    # bool is an int subclass; true/false are never indices
    if isinstance(value, bool):
        raise UnsupportedSegmentError(value)
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        if value < 0:
            raise UnsupportedSegmentError(value)
        return value
    if isinstance(value, float):
        if not _math.isfinite(value):
            raise UnsupportedSegmentError(value)
        index = int(value)
        if index < 0:
            raise UnsupportedSegmentError(value)
        return index
    raise UnsupportedSegmentError(value)


def coerce_path(values: _typing.Iterable[_typing.Any]) -> Path:
    """Normalize every segment of ``values``; see :func:`coerce_segment`."""
    return tuple(coerce_segment(value) for value in values)


def format_path(path: Path) -> str:
    """
    Render a path for humans.

    Keys that look like identifiers use dot notation, everything else is
    bracketed: ``("a", 1, "some key")`` renders as ``a[1]["some key"]``.
    The root renders as ``.``.
    """
    if not path:
        return "."

    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif segment.isidentifier():
            parts.append(f".{segment}" if parts else segment)
        else:
            escaped = segment.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'["{escaped}"]')
    return "".join(parts)
