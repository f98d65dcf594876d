"""
Coverage reports.

Compares the paths a tracer observed with the shape of the input document.
A document leaf (a scalar, or an empty array or object) counts as covered
when its own path, or the path of one of its ancestors, was observed:
reading ``input.a`` as a whole reads everything inside it.

The root path is never treated as observed, so the ``[()]`` that an
untouched tracer reports yields 0% rather than 100%.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import covertrace.paths as paths
import covertrace.terms.values as values
import covertrace.trie as trie


@_dataclasses.dataclass
class CoverageReport:
    """
    Covered and uncovered leaves of one document.

    Attributes:
        covered: Leaf paths that were read, in document order.
        uncovered: Leaf paths that were not read, in document order.
    """

    covered: list[paths.Path] = _dataclasses.field(default_factory=list)
    uncovered: list[paths.Path] = _dataclasses.field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.covered) + len(self.uncovered)

    @property
    def percent(self) -> float:
        """Covered share of leaves, 0-100. An empty document is fully covered."""
        if self.total == 0:
            return 100.0
        return 100.0 * len(self.covered) / self.total

    def passes(self, min_coverage: float) -> bool:
        """Whether coverage reaches ``min_coverage`` percent."""
        return self.percent >= min_coverage

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to a JSON-serializable dict; paths become arrays."""
        return {
            "total": self.total,
            "covered_count": len(self.covered),
            "percent": round(self.percent, 2),
            "covered": [list(path) for path in self.covered],
            "uncovered": [list(path) for path in self.uncovered],
        }


def document_leaves(root: values.Term | values.Value) -> list[paths.Path]:
    """
    List the leaf paths of a document in document order.

    Entries under non-string object keys are not part of any path and are
    left out, along with everything beneath them.
    """
    leaves: list[paths.Path] = []
    stack: list[tuple[paths.Path, values.Value]] = [
        (paths.ROOT, root.value if isinstance(root, values.Term) else root)
    ]

    while stack:
        path, value = stack.pop()
        children: list[tuple[paths.Path, values.Value]] = []
        if isinstance(value, values.Array):
            children = [((*path, i), item.value) for i, item in enumerate(value.terms)]
        elif isinstance(value, values.Object):
            children = [
                ((*path, key.value.value), item.value)
                for key, item in value.items
                if isinstance(key.value, values.String)
            ]
            if not children and len(value):
                # Only non-string keys: nothing addressable below
                continue
        if not children:
            leaves.append(path)
            continue
        stack.extend(reversed(children))

    return leaves


def build_report(
    document: values.Term | values.Value,
    covered: _typing.Iterable[_typing.Sequence[_typing.Any]],
) -> CoverageReport:
    """
    Build a coverage report.

    Args:
        document: The input document (decorated or not).
        covered: Observed paths, e.g. ``CoverageTracer.covered()`` or a list
            of JSON arrays loaded from disk. Float indices are truncated;
            unusable paths are ignored.

    Returns:
        CoverageReport over the document's leaves.
    """
    observed = trie.PathTrie()
    for path in covered:
        observed.add(path)

    report = CoverageReport()
    for leaf in document_leaves(document):
        if observed.covers(leaf):
            report.covered.append(leaf)
        else:
            report.uncovered.append(leaf)
    return report
