"""
Built-in function registry.

The evaluation engine knows a fixed set of functions natively. The coverage
tracer only needs a membership test: "is this operator a built-in?". The
default set mirrors the names a typical policy engine ships; hosts with a
different catalogue pass their own registry.
"""

from __future__ import annotations

import typing as _typing

DEFAULT_BUILTINS: frozenset[str] = frozenset({
    # Equality and comparison
    "eq",
    "equal",
    "neq",
    "lt",
    "lte",
    "gt",
    "gte",
    # Arithmetic
    "plus",
    "minus",
    "mul",
    "div",
    "rem",
    "abs",
    "round",
    "ceil",
    "floor",
    # Aggregates
    "count",
    "sum",
    "product",
    "max",
    "min",
    "sort",
    # Collections
    "and",
    "or",
    "internal.member_2",
    "internal.member_3",
    "array.concat",
    "array.slice",
    "object.get",
    "object.keys",
    "object.remove",
    "object.union",
    # Strings
    "concat",
    "contains",
    "startswith",
    "endswith",
    "format_int",
    "indexof",
    "lower",
    "upper",
    "replace",
    "split",
    "sprintf",
    "substring",
    "trim",
    "trim_space",
    "regex.match",
    "glob.match",
    # Types
    "to_number",
    "is_array",
    "is_boolean",
    "is_null",
    "is_number",
    "is_object",
    "is_string",
    "type_name",
    # Encoding
    "json.marshal",
    "json.unmarshal",
    "base64.encode",
    "base64.decode",
    # Time
    "time.now_ns",
    "time.parse_rfc3339_ns",
})


class BuiltinRegistry:
    """
    Set of built-in function names, keyed by canonical dotted name.

    Example:
        >>> registry = BuiltinRegistry()
        >>> "count" in registry
        True
        >>> registry.register("custom.lookup")
        >>> registry.is_builtin("custom.lookup")
        True
    """

    def __init__(self, names: _typing.Iterable[str] | None = None) -> None:
        """
        Initialize the registry.

        Args:
            names: Built-in names to start with. Defaults to DEFAULT_BUILTINS.
        """
        self._names: set[str] = set(DEFAULT_BUILTINS if names is None else names)

    def register(self, name: str) -> None:
        """Add a built-in by canonical name."""
        self._names.add(name)

    def unregister(self, name: str) -> None:
        """Remove a built-in if present."""
        self._names.discard(name)

    def is_builtin(self, name: str | None) -> bool:
        return name is not None and name in self._names

    def names(self) -> list[str]:
        """Return the registered names, sorted."""
        return sorted(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._names

    def __len__(self) -> int:
        return len(self._names)
