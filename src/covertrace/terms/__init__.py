"""
Host term model for covertrace.

The value shapes a policy evaluation engine hands to a query tracer, plus the
built-in function registry the tracer consults.
"""

from covertrace.terms.builtins import DEFAULT_BUILTINS, BuiltinRegistry
from covertrace.terms.values import (
    Array,
    Boolean,
    Call,
    Expr,
    Location,
    Null,
    Number,
    Object,
    Ref,
    String,
    Term,
    Value,
    Var,
    call,
    from_python,
    ref,
    resolver,
    substitute,
    to_python,
    var,
)

__all__ = [
    "DEFAULT_BUILTINS",
    "Array",
    "Boolean",
    "BuiltinRegistry",
    "Call",
    "Expr",
    "Location",
    "Null",
    "Number",
    "Object",
    "Ref",
    "String",
    "Term",
    "Value",
    "Var",
    "call",
    "from_python",
    "ref",
    "resolver",
    "substitute",
    "to_python",
    "var",
]
