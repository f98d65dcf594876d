"""Tests for the host term model."""

import pytest as _pytest

import covertrace.terms as terms

_DEEP = 3000


def _nest(leaf: terms.Term, depth: int) -> terms.Term:
    """Wrap ``leaf`` in ``depth`` single-element arrays."""
    term = leaf
    for _ in range(depth):
        term = terms.Term(terms.Array([term]))
    return term


def _innermost(term: terms.Term) -> terms.Term:
    while isinstance(term.value, terms.Array):
        term = term.value.terms[0]
    return term


class TestGround:
    """Tests for is_ground across value kinds."""

    def test_scalars_are_ground(self) -> None:
        """Null, booleans, numbers and strings are ground."""
        for value in (None, True, 1, 2.5, "x"):
            assert terms.from_python(value).is_ground() is True

    def test_var_is_not_ground(self) -> None:
        """Variables are never ground."""
        assert terms.var("x").is_ground() is False

    def test_composites_ground_recursively(self) -> None:
        """Arrays and objects are ground when everything inside is."""
        assert terms.from_python({"a": [1, {"b": None}]}).is_ground() is True
        array = terms.Term(terms.Array([terms.from_python(1), terms.var("x")]))
        assert array.is_ground() is False
        obj = terms.Term(terms.Object([(terms.from_python("k"), terms.var("x"))]))
        assert obj.is_ground() is False

    def test_ref_ignores_head(self) -> None:
        """A ref is ground when the terms after its head are."""
        assert terms.ref("input", "a", 1).is_ground() is True
        ref = terms.Term(terms.Ref([terms.var("input"), terms.var("i")]))
        assert ref.is_ground() is False

    def test_deep_nesting_no_recursion_limit(self) -> None:
        """Nesting deeper than the interpreter's recursion limit is handled."""
        assert _nest(terms.from_python(1), _DEEP).is_ground() is True
        assert _nest(terms.var("x"), _DEEP).is_ground() is False


class TestStr:
    """Tests for policy-like rendering."""

    def test_ref_rendering(self) -> None:
        """Identifier keys use dots, others brackets."""
        assert str(terms.ref("input", "servers", 0, "host name")) == 'input.servers[0]["host name"]'

    def test_scalar_rendering(self) -> None:
        """Scalars render as JSON literals."""
        assert str(terms.from_python("x")) == '"x"'
        assert str(terms.from_python(None)) == "null"
        assert str(terms.from_python(False)) == "false"
        assert str(terms.from_python(1.5)) == "1.5"

    def test_composite_rendering(self) -> None:
        """Arrays and objects render their members."""
        assert str(terms.from_python([1, "a"])) == '[1, "a"]'
        assert str(terms.from_python({"k": 1})) == '{"k": 1}'

    def test_expr_rendering(self) -> None:
        """Call-form expressions render as calls."""
        expr = terms.call("count", terms.ref("input", "a"))
        assert str(expr) == "count(input.a)"
        assert str(terms.Expr(terms.ref("input", "ok"), negated=True)) == "not input.ok"


class TestExpr:
    """Tests for Expr helpers."""

    def test_call_parts(self) -> None:
        """Operator and operands are split off a call-form expression."""
        expr = terms.call("regex.match", terms.from_python("^a"), terms.var("x"))
        assert expr.is_call() is True
        assert expr.operator_name() == "regex.match"
        assert [str(t) for t in expr.operands()] == ['"^a"', "x"]

    def test_single_term_expr(self) -> None:
        """A single-term expression has no operator."""
        expr = terms.Expr(terms.ref("input", "ok"))
        assert expr.is_call() is False
        assert expr.operator() is None
        assert expr.operator_name() is None
        assert expr.operands() == []

    def test_non_ref_operator_has_no_name(self) -> None:
        """Only ref operators have a canonical name."""
        expr = terms.Expr([terms.var("f"), terms.from_python(1)])
        assert expr.operator_name() is None

    @_pytest.mark.parametrize("operator", ["eq", "equal"])
    def test_equality(self, operator: str) -> None:
        """Two-operand eq and equal are equality tests."""
        expr = terms.call(operator, terms.var("x"), terms.from_python(1))
        assert expr.is_equality() is True

    def test_not_equality(self) -> None:
        """Other operators, or other arities, are not equality tests."""
        assert terms.call("neq", terms.var("x"), terms.var("y")).is_equality() is False
        assert terms.call("eq", terms.var("x")).is_equality() is False


class TestPythonConversion:
    """Tests for from_python and to_python."""

    def test_round_trip(self) -> None:
        """JSON-like data survives conversion both ways."""
        data = {"a": [1, 2.5, None, True], "b": {"c": "x"}, "d": []}
        assert terms.to_python(terms.from_python(data)) == data

    def test_non_string_keys_preserved(self) -> None:
        """Object keys keep their type."""
        term = terms.from_python({1: "one"})
        key, _ = term.value.items[0]
        assert isinstance(key.value, terms.Number)

    def test_unsupported_type(self) -> None:
        """Values with no term equivalent raise TypeError."""
        with _pytest.raises(TypeError):
            terms.from_python(object())

    def test_to_python_rejects_variables(self) -> None:
        """Non-ground terms cannot become Python data."""
        with _pytest.raises(ValueError):
            terms.to_python(terms.var("x"))

    def test_object_get(self) -> None:
        """Object values can be looked up by key."""
        obj = terms.from_python({"a": 1}).value
        assert obj.get("a") == terms.from_python(1)
        assert obj.get(terms.from_python("a")) == terms.from_python(1)
        assert obj.get("missing") is None


class TestSubstitute:
    """Tests for substitute and resolver."""

    def test_bound_var_returns_bound_term_itself(self) -> None:
        """Resolution hands back the bound term, origin included."""
        bound = terms.Term(terms.Number(2), location=terms.Location(file="path:[1]"))
        resolved = terms.substitute(terms.var("x"), {"x": bound})
        assert resolved is bound

    def test_binding_chain(self) -> None:
        """x -> y -> value resolves to the value."""
        value = terms.from_python("v")
        resolved = terms.substitute(terms.var("x"), {"x": terms.var("y"), "y": value})
        assert resolved is value

    def test_cycle_stops(self) -> None:
        """Cyclic bindings leave a variable in place."""
        resolved = terms.substitute(terms.var("x"), {"x": terms.var("y"), "y": terms.var("x")})
        assert isinstance(resolved.value, terms.Var)

    def test_unbound_var_unchanged(self) -> None:
        """Unbound variables resolve to themselves."""
        term = terms.var("z")
        assert terms.substitute(term, {}) is term

    def test_composite_rebuilt_only_when_changed(self) -> None:
        """Unchanged composites are returned as-is; changed ones are rebuilt."""
        unchanged = terms.from_python([1, 2])
        assert terms.substitute(unchanged, {"x": terms.from_python(1)}) is unchanged

        array = terms.Term(
            terms.Array([terms.var("x")]),
            location=terms.Location(file="policy.rego"),
        )
        resolved = terms.substitute(array, {"x": terms.from_python(1)})
        assert resolved is not array
        assert resolved == terms.from_python([1])
        assert resolved.location == array.location
        assert resolved.is_ground() is True

    def test_object_values_substituted(self) -> None:
        """Variables inside objects are resolved."""
        obj = terms.Term(terms.Object([(terms.from_python("k"), terms.var("x"))]))
        resolved = terms.substitute(obj, {"x": terms.from_python(3)})
        assert terms.to_python(resolved) == {"k": 3}

    def test_self_reference_resolves_once(self) -> None:
        """A variable bound to a term containing itself is expanded once."""
        resolved = terms.substitute(
            terms.var("x"), {"x": terms.Term(terms.Array([terms.var("x")]))}
        )
        assert isinstance(resolved.value, terms.Array)
        assert resolved.value.terms[0].value == terms.Var("x")

    def test_deep_nesting_no_recursion_limit(self) -> None:
        """Deeply nested terms are resolved without hitting the recursion limit."""
        bound = terms.Term(terms.Number(7), provenance=("a",))
        resolved = terms.substitute(_nest(terms.var("x"), _DEEP), {"x": bound})
        assert _innermost(resolved) is bound

        unchanged = _nest(terms.from_python(1), _DEEP)
        assert terms.substitute(unchanged, {"x": bound}) is unchanged

    def test_resolver_callback(self) -> None:
        """resolver() builds a callback over fixed bindings."""
        resolve = terms.resolver({"x": terms.from_python(1)})
        assert resolve(terms.var("x")) == terms.from_python(1)


class TestTermEquality:
    """Tests for Term comparison."""

    def test_equal_by_value_only(self) -> None:
        """Origin does not take part in equality."""
        a = terms.Term(terms.String("x"), location=terms.Location(file="a"))
        b = terms.Term(terms.String("x"), location=terms.Location(file="b"))
        assert a == b
        assert a != terms.from_python("y")

    def test_int_and_bool_differ(self) -> None:
        """true is not 1."""
        assert terms.from_python(True) != terms.from_python(1)
