"""
Prefix tree over document paths.

PathTrie stores a set of paths compactly: paths sharing a prefix share the
chain of nodes for that prefix. Every node keeps integer segments and string
segments in separate child maps, so the index ``1`` and the key ``"1"`` never
collide.

Each node also remembers whether a path ended there. That lets enumeration
report a path that was recorded even when a longer path through it was
recorded too. ``paths(leaves_only=True)`` gives the plain root-to-leaf view
instead.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import covertrace.paths as paths

_logger = _logging.getLogger(__name__)


class _Node:
    """One trie node. Children are keyed by segment type."""

    __slots__ = ("int_children", "str_children", "recorded")

    def __init__(self) -> None:
        self.int_children: dict[int, _Node] = {}
        self.str_children: dict[str, _Node] = {}
        self.recorded = False

    def child(self, segment: paths.Segment) -> _Node | None:
        if isinstance(segment, int):
            return self.int_children.get(segment)
        return self.str_children.get(segment)

    def child_for_insert(self, segment: paths.Segment) -> _Node:
        children: dict[_typing.Any, _Node]
        children = self.int_children if isinstance(segment, int) else self.str_children
        node = children.get(segment)
        if node is None:
            node = children[segment] = _Node()
        return node

    def items(self) -> _typing.Iterator[tuple[paths.Segment, _Node]]:
        yield from self.int_children.items()
        yield from self.str_children.items()

    def is_leaf(self) -> bool:
        return not self.int_children and not self.str_children


class PathTrie:
    """
    A set of document paths backed by a prefix tree.

    The trie is not thread-safe. Callers sharing one instance between
    threads must serialize access themselves (CoverageTracer does).

    Example:
        >>> trie = PathTrie()
        >>> trie.add(("a", 1))
        True
        >>> trie.add(["a", 1.0])
        False
        >>> trie.paths()
        [('a', 1)]
    """

    def __init__(self) -> None:
        self._root = _Node()
        self._count = 0

    def add(self, path: _typing.Sequence[_typing.Any]) -> bool:
        """
        Insert a path.

        The empty path is ignored: the root itself is never recorded. A path
        holding an unsupported segment is dropped as a whole and a warning is
        logged; insertion never raises.

        Args:
            path: Sequence of keys and indices. Float indices are truncated.

        Returns:
            True if the path was not already present.
        """
        if not path:
            return False

        try:
            normalized = paths.coerce_path(path)
        except paths.UnsupportedSegmentError as e:
            _logger.warning("uncovered: dropping path %r: %s", tuple(path), e)
            return False

        node = self._root
        for segment in normalized:
            node = node.child_for_insert(segment)

        if node.recorded:
            return False
        node.recorded = True
        self._count += 1
        return True

    def paths(self, *, leaves_only: bool = False) -> list[paths.Path]:
        """
        Enumerate the stored paths.

        Order is unspecified. A trie without any children reports the root
        path, ``[()]``, not an empty list.

        Args:
            leaves_only: Report only root-to-leaf paths. A recorded path
                that is a prefix of another recorded path is then omitted.

        Returns:
            Deduplicated list of paths.
        """
        if self._root.is_leaf():
            return [paths.ROOT]

        result: list[paths.Path] = []
        stack: list[tuple[paths.Path, _Node]] = [(paths.ROOT, self._root)]
        while stack:
            prefix, node = stack.pop()
            for segment, child in node.items():
                path = (*prefix, segment)
                if child.is_leaf() or (child.recorded and not leaves_only):
                    result.append(path)
                if not child.is_leaf():
                    stack.append((path, child))
        return result

    def covers(self, path: _typing.Sequence[_typing.Any]) -> bool:
        """
        Check whether ``path`` or one of its ancestors was recorded.

        Args:
            path: Path to look up. Unsupported segments never match.

        Returns:
            True if a recorded path is equal to or a prefix of ``path``.
        """
        try:
            normalized = paths.coerce_path(path)
        except paths.UnsupportedSegmentError:
            return False

        node = self._root
        for segment in normalized:
            child = node.child(segment)
            if child is None:
                return False
            if child.recorded:
                return True
            node = child
        return False

    def clear(self) -> None:
        """Remove every stored path."""
        self._root = _Node()
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (tuple, list)) or not path:
            return False
        try:
            normalized = paths.coerce_path(path)
        except paths.UnsupportedSegmentError:
            return False

        node = self._root
        for segment in normalized:
            child = node.child(segment)
            if child is None:
                return False
            node = child
        return node.recorded

    def __repr__(self) -> str:
        return f"PathTrie({len(self)} paths)"
