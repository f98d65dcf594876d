"""
Host term model.

These types describe the values a policy evaluation engine hands to a query
tracer. Every value is wrapped in a Term, and every Term carries an optional
origin Location. The Location's ``file`` is the general-purpose string that
document decoration overloads with an encoded path; ``provenance`` is the
dedicated slot for the same information.

Value kinds:
- Scalars: Null, Boolean, Number, String
- Variables: Var
- References: Ref (``input.a[1]``), whose head is usually a Var
- Composites: Array, Object (string-keyed or not)
- Calls: Call (a function application used as a value)

Expressions (Expr) are the statements of a rule body. A call-form
expression is a list of terms whose first element is the operator.
"""

from __future__ import annotations

import abc as _abc
import collections.abc as _cabc
import dataclasses as _dataclasses
import json as _json
import typing as _typing

import covertrace.constants as _constants
import covertrace.paths as paths

# =============================================================================
# Locations
# =============================================================================


@_dataclasses.dataclass
class Location:
    """Origin of a term: source file name plus position."""

    file: str = ""
    row: int = 0
    col: int = 0

    def __str__(self) -> str:
        if self.row:
            return f"{self.file}:{self.row}:{self.col}"
        return self.file


# =============================================================================
# Values
# =============================================================================


class Value(_abc.ABC):
    """Base class for everything a Term can wrap."""

    @_abc.abstractmethod
    def is_ground(self) -> bool:
        """Whether the value contains no variables."""

    @_abc.abstractmethod
    def __str__(self) -> str: ...


@_dataclasses.dataclass(frozen=True)
class Null(Value):
    def is_ground(self) -> bool:
        return True

    def __str__(self) -> str:
        return "null"


@_dataclasses.dataclass(frozen=True)
class Boolean(Value):
    value: bool

    def is_ground(self) -> bool:
        return True

    def __str__(self) -> str:
        return "true" if self.value else "false"


@_dataclasses.dataclass(frozen=True)
class Number(Value):
    value: int | float

    def is_ground(self) -> bool:
        return True

    def __str__(self) -> str:
        return _json.dumps(self.value)


@_dataclasses.dataclass(frozen=True)
class String(Value):
    value: str

    def is_ground(self) -> bool:
        return True

    def __str__(self) -> str:
        return _json.dumps(self.value, ensure_ascii=False)


@_dataclasses.dataclass(frozen=True)
class Var(Value):
    name: str

    def is_ground(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.name


@_dataclasses.dataclass
class Ref(Value):
    """
    A reference such as ``input.servers[0].name``.

    The head (first term) is a variable naming the root document or a
    function. A ref counts as ground when every term after the head is.
    """

    terms: list[Term]

    def is_ground(self) -> bool:
        return _is_ground(self)

    def __str__(self) -> str:
        if not self.terms:
            return ""
        parts = [str(self.terms[0])]
        for term in self.terms[1:]:
            if isinstance(term.value, String) and term.value.value.isidentifier():
                parts.append(f".{term.value.value}")
            else:
                parts.append(f"[{term}]")
        return "".join(parts)


@_dataclasses.dataclass
class Array(Value):
    terms: list[Term]

    def is_ground(self) -> bool:
        return _is_ground(self)

    def __len__(self) -> int:
        return len(self.terms)

    def __str__(self) -> str:
        return "[" + ", ".join(str(term) for term in self.terms) + "]"


@_dataclasses.dataclass
class Object(Value):
    """An object as an ordered list of (key, value) term pairs."""

    items: list[tuple[Term, Term]]

    def is_ground(self) -> bool:
        return _is_ground(self)

    def get(self, key: str | Term) -> Term | None:
        """Look up a value by key term, or by string key."""
        target = String(key) if isinstance(key, str) else key.value
        for item_key, item_value in self.items:
            if item_key.value == target:
                return item_value
        return None

    def keys(self) -> list[Term]:
        return [key for key, _ in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return "{" + ", ".join(f"{key}: {value}" for key, value in self.items) + "}"


@_dataclasses.dataclass
class Call(Value):
    """A function application used as a value, e.g. ``count(input.a)``."""

    terms: list[Term]

    def is_ground(self) -> bool:
        return _is_ground(self)

    def __str__(self) -> str:
        if not self.terms:
            return ""
        args = ", ".join(str(term) for term in self.terms[1:])
        return f"{self.terms[0]}({args})"


def _is_ground(root: Value) -> bool:
    """Walk a value with an explicit stack; nesting depth is not bounded."""
    stack = [root]
    while stack:
        value = stack.pop()
        if isinstance(value, Var):
            return False
        if isinstance(value, Ref):
            # The head names the document root, not a variable to solve
            stack.extend(term.value for term in value.terms[1:])
        elif isinstance(value, (Array, Call)):
            stack.extend(term.value for term in value.terms)
        elif isinstance(value, Object):
            for key, item in value.items:
                stack.append(key.value)
                stack.append(item.value)
        elif not value.is_ground():
            return False
    return True


# =============================================================================
# Terms and expressions
# =============================================================================


@_dataclasses.dataclass(eq=False)
class Term:
    """
    A value together with where it came from.

    Attributes:
        value: The wrapped value.
        location: Origin of the term. Decorated documents store the encoded
            document path in ``location.file``.
        provenance: Document path of the term, set by decoration. None for
            terms that did not come from a decorated document.
    """

    value: Value
    location: Location | None = None
    provenance: paths.Path | None = None

    def is_ground(self) -> bool:
        return self.value.is_ground()

    def __eq__(self, other: object) -> bool:
        # Terms compare by value; origin is metadata.
        if not isinstance(other, Term):
            return NotImplemented
        return self.value == other.value

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return str(self.value)


@_dataclasses.dataclass
class Expr:
    """
    One statement of a rule body.

    ``terms`` is either a single Term (``input.enabled``) or, for call-form
    expressions, a list whose first element is the operator:
    ``[ref(eq), lhs, rhs]`` for ``lhs = rhs``.
    """

    terms: Term | list[Term]
    negated: bool = False
    location: Location | None = None

    def is_call(self) -> bool:
        return isinstance(self.terms, list) and len(self.terms) > 0

    def operator(self) -> Term | None:
        if not self.is_call():
            return None
        return _typing.cast(list[Term], self.terms)[0]

    def operator_name(self) -> str | None:
        """Canonical name of the operator if it is a reference, else None."""
        operator = self.operator()
        if operator is None or not isinstance(operator.value, Ref):
            return None
        return str(operator.value)

    def operands(self) -> list[Term]:
        if not self.is_call():
            return []
        return list(_typing.cast(list[Term], self.terms)[1:])

    def is_equality(self) -> bool:
        """Whether this is a two-operand equality test (``=`` or ``==``)."""
        return (
            self.is_call()
            and len(_typing.cast(list[Term], self.terms)) == 3
            and self.operator_name() in _constants.EQUALITY_OPERATORS
        )

    def __str__(self) -> str:
        prefix = "not " if self.negated else ""
        if isinstance(self.terms, Term):
            return prefix + str(self.terms)
        name = str(self.terms[0]) if self.terms else ""
        args = ", ".join(str(term) for term in self.terms[1:])
        return f"{prefix}{name}({args})"


# =============================================================================
# Constructors
# =============================================================================


def var(name: str) -> Term:
    """Build a variable term."""
    return Term(Var(name))


def ref(head: str, *keys: str | int) -> Term:
    """
    Build a reference term.

    ``ref("input", "a", 1)`` is ``input.a[1]``; ``ref("regex", "match")``
    is the operator name ``regex.match``.
    """
    terms = [var(head)]
    for key in keys:
        terms.append(Term(String(key)) if isinstance(key, str) else Term(Number(key)))
    return Term(Ref(terms))


def call(operator: str, *operands: Term) -> Expr:
    """Build a call-form expression; dotted operator names become refs."""
    head, *keys = operator.split(".")
    return Expr([ref(head, *keys), *operands])


def from_python(obj: _typing.Any) -> Term:
    """
    Convert JSON-like Python data into a term tree.

    Mappings become Objects (keys converted the same way, so non-string
    keys are preserved), lists and tuples become Arrays.

    Raises:
        TypeError: For values with no term equivalent.
    """
    if isinstance(obj, Term):
        return obj
    if obj is None:
        return Term(Null())
    if isinstance(obj, bool):
        return Term(Boolean(obj))
    if isinstance(obj, (int, float)):
        return Term(Number(obj))
    if isinstance(obj, str):
        return Term(String(obj))
    if isinstance(obj, _cabc.Mapping):
        return Term(Object([(from_python(k), from_python(v)) for k, v in obj.items()]))
    if isinstance(obj, (list, tuple)):
        return Term(Array([from_python(item) for item in obj]))
    raise TypeError(f"cannot convert {type(obj).__name__} to a term")


def to_python(term: Term | Value) -> _typing.Any:
    """
    Convert a ground term tree back into Python data.

    Raises:
        ValueError: If the tree contains variables, refs or calls.
    """
    value = term.value if isinstance(term, Term) else term
    if isinstance(value, Null):
        return None
    if isinstance(value, (Boolean, Number, String)):
        return value.value
    if isinstance(value, Array):
        return [to_python(item) for item in value.terms]
    if isinstance(value, Object):
        return {to_python(k): to_python(v) for k, v in value.items}
    raise ValueError(f"cannot convert non-ground value {value} to Python data")


# =============================================================================
# Substitution
# =============================================================================


def substitute(term: Term, bindings: _typing.Mapping[str, Term]) -> Term:
    """
    Replace bound variables inside ``term``.

    Bound variables resolve to the bound term itself, not a copy, so origin
    information on document terms survives. Composites are rebuilt only when
    something inside them changed. Binding chains (``x -> y -> value``) are
    followed; a cycle leaves the variable in place.

    Args:
        term: Term to resolve.
        bindings: Variable name to bound term.

    Returns:
        The resolved term.
    """
    return _substitute(term, bindings)


def _substitute(root: Term, bindings: _typing.Mapping[str, Term]) -> Term:
    # Post-order walk with an explicit stack. A frame is visited once to
    # push its children and once more (expanded) to rebuild from their
    # results, which sit on top of ``results`` in document order.
    results: list[Term] = []
    stack: list[tuple[Term, frozenset[str], bool]] = [(root, frozenset(), False)]

    while stack:
        term, seen, expanded = stack.pop()

        if expanded:
            children = _operands(term.value)
            resolved = results[len(results) - len(children) :]
            del results[len(results) - len(children) :]
            results.append(_rebuild(term, children, resolved))
            continue

        term, seen = _follow(term, bindings, seen)
        children = _operands(term.value)
        if not children:
            results.append(term)
            continue

        stack.append((term, seen, True))
        stack.extend((child, seen, False) for child in reversed(children))

    return results[0]


def _follow(
    term: Term,
    bindings: _typing.Mapping[str, Term],
    seen: frozenset[str],
) -> tuple[Term, frozenset[str]]:
    """Follow a variable's binding chain; stop at an unbound or repeated name."""
    while isinstance(term.value, Var):
        name = term.value.name
        bound = bindings.get(name)
        if bound is None or name in seen:
            break
        seen = seen | {name}
        term = bound
    return term, seen


def _operands(value: Value) -> list[Term]:
    """Direct child terms of a composite; object items flatten to key, value."""
    if isinstance(value, (Array, Ref, Call)):
        return value.terms
    if isinstance(value, Object):
        return [term for item in value.items for term in item]
    return []


def _rebuild(term: Term, children: list[Term], resolved: list[Term]) -> Term:
    if all(new is old for new, old in zip(resolved, children, strict=True)):
        return term

    value = term.value
    if isinstance(value, Object):
        items = list(zip(resolved[0::2], resolved[1::2], strict=True))
        return Term(Object(items), term.location, term.provenance)
    return Term(type(value)(resolved), term.location, term.provenance)


def resolver(bindings: _typing.Mapping[str, Term]) -> _typing.Callable[[Term], Term]:
    """Build a resolve callback that substitutes ``bindings``."""

    def resolve(term: Term) -> Term:
        return substitute(term, bindings)

    return resolve
