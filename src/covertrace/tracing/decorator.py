"""
Document decoration.

Before evaluation, every node of the input document is tagged with its own
structural path. The tag goes into the origin attribute every term already
carries (``term.location.file = 'path:["a",1]'``) and, unless disabled, into
the term's dedicated ``provenance`` slot.

Only arrays and string-keyed object entries are followed. An object entry
whose key is not a string is skipped together with everything below it.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import covertrace.codec as codec
import covertrace.paths as paths
import covertrace.terms.values as values

if _typing.TYPE_CHECKING:
    import covertrace.logging.trace_logger as trace_logger

_logger = _logging.getLogger(__name__)


class DocumentDecorator:
    """
    Tags the terms of a document tree with their paths.

    Traversal is depth-first and preorder: a node is tagged before any of
    its children. The path stack lives inside one ``decorate`` call, so a
    decorator can be shared between documents and threads. Decorating the
    same tree twice writes identical tags.
    """

    def __init__(
        self,
        *,
        provenance: bool = True,
        trace_logger: trace_logger.TraceLogger | None = None,
    ) -> None:
        """
        Initialize the decorator.

        Args:
            provenance: Also set ``Term.provenance`` on every tagged term.
                When False, any provenance left by an earlier pass is cleared.
            trace_logger: Optional JSONL logger receiving one record per tag.
        """
        self._provenance = provenance
        self._trace_logger = trace_logger

    def decorate(self, root: values.Term | values.Value) -> int:
        """
        Tag every node of ``root`` with its path.

        A bare Value has no wrapping term of its own, so only its
        descendants are tagged. A Term root is tagged with the empty path.

        Args:
            root: Document to decorate, modified in place.

        Returns:
            Number of terms tagged.

        Raises:
            codec.PathEncodeError: If a path cannot be encoded. Decoration
                stops; terms tagged so far keep their tags.
        """
        count = 0
        stack: list[tuple[paths.Path, values.Term | values.Value]] = [(paths.ROOT, root)]

        while stack:
            path, node = stack.pop()

            if isinstance(node, values.Term):
                self._tag(node, path)
                count += 1
                value = node.value
            else:
                value = node

            # Children are pushed in reverse so they pop in document order
            for child_path, child in reversed(list(_children(value, path))):
                stack.append((child_path, child))

        _logger.debug("Decorated %d terms", count)
        return count

    def _tag(self, term: values.Term, path: paths.Path) -> None:
        encoded = codec.encode_path(path)
        term.location = values.Location(file=encoded)
        # A stale provenance would outrank the new origin tag
        term.provenance = path if self._provenance else None
        if self._trace_logger is not None:
            self._trace_logger.log_decorated(path, encoded)


def _children(
    value: values.Value,
    path: paths.Path,
) -> _typing.Iterator[tuple[paths.Path, values.Term]]:
    """Yield (child path, child term) pairs of a composite value."""
    if isinstance(value, values.Array):
        for index, item in enumerate(value.terms):
            yield (*path, index), item
    elif isinstance(value, values.Object):
        for key, item in value.items:
            if isinstance(key.value, values.String):
                yield (*path, key.value.value), item
            else:
                _logger.debug("Skipping non-string key %s under %s", key, paths.format_path(path))


def decorate_document(
    root: values.Term | values.Value,
    *,
    provenance: bool = True,
) -> int:
    """Tag every node of ``root`` with its path; see DocumentDecorator."""
    return DocumentDecorator(provenance=provenance).decorate(root)
