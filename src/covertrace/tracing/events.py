"""
Trace event types and the query tracer contract.

These define the boundary between a policy evaluation engine and a tracer:
- EventOp: Enum of every kind of event the engine emits
- Event: One emitted event, with a callback that resolves terms
- TraceConfig: What the tracer asks of the engine before a run
- QueryTracer: The interface a tracer implements
"""

from __future__ import annotations

import abc as _abc
import dataclasses as _dataclasses
import enum as _enum
import typing as _typing

import covertrace.terms.values as values


class EventOp(_enum.Enum):
    """
    Kinds of trace events.

    The engine sets the op once when it builds the event; consumers dispatch
    on it instead of inspecting the node's shape.
    """

    ENTER = "enter"
    """Evaluation entered a query or rule body."""

    EXIT = "exit"
    """Evaluation of a query or rule body produced a result."""

    EVAL = "eval"
    """An expression is about to be evaluated. Node is an Expr."""

    REDO = "redo"
    """Evaluation is backtracking into an expression."""

    SAVE = "save"
    """An expression was saved for partial evaluation."""

    FAIL = "fail"
    """An expression evaluated to false or undefined."""

    DUPLICATE = "duplicate"
    """A result duplicated an earlier one and was dropped."""

    NOTE = "note"
    """A user note (``trace("...")``)."""

    INDEX = "index"
    """Rule indexing selected candidate rules."""

    WASM = "wasm"
    """Event from a compiled-policy backend."""

    UNIFY = "unify"
    """Two terms are being unified. Node is an Expr ``eq(lhs, rhs)``."""

    @property
    def carries_values(self) -> bool:
        """Whether events of this kind can expose resolved values."""
        return self in {EventOp.EVAL, EventOp.UNIFY}


@_dataclasses.dataclass
class TraceConfig:
    """
    Tracer preferences the engine reads once before evaluation.

    Attributes:
        plug_local_vars: If True, the engine substitutes every local
            variable into the event node before delivery. If False, the
            tracer resolves what it needs through ``Event.plug``.
    """

    plug_local_vars: bool = True


@_dataclasses.dataclass
class Event:
    """
    A single trace event.

    Attributes:
        op: Kind of event.
        node: The construct being traced (usually an Expr or Term).
        resolve: Callback returning the fully-substituted form of a term as
            of this event. None means terms are already resolved.
        query_id: Identifier of the query that emitted the event.
        parent_id: Identifier of the enclosing query.
        location: Policy source location of the node.
        message: Free text (for NOTE events).
    """

    op: EventOp
    node: values.Expr | values.Term | None = None
    resolve: _typing.Callable[[values.Term], values.Term] | None = None
    query_id: int = 0
    parent_id: int = 0
    location: values.Location | None = None
    message: str = ""

    def plug(self, term: values.Term) -> values.Term:
        """Resolve ``term`` as of this event."""
        if self.resolve is None:
            return term
        return self.resolve(term)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to a JSON-serializable dict for diagnostics."""
        result: dict[str, _typing.Any] = {
            "op": self.op.value,
            "query_id": self.query_id,
            "parent_id": self.parent_id,
        }
        if self.node is not None:
            result["node"] = str(self.node)
        if self.location is not None:
            result["location"] = str(self.location)
        if self.message:
            result["message"] = self.message
        return result


class QueryTracer(_abc.ABC):
    """
    Interface for consumers of the engine's trace-event stream.

    The engine calls ``enabled()`` and ``config()`` once before a run, then
    ``trace_event()`` synchronously for every event, in order, on its own
    evaluation thread.
    """

    @_abc.abstractmethod
    def enabled(self) -> bool:
        """Whether the tracer wants events at all."""

    @_abc.abstractmethod
    def config(self) -> TraceConfig:
        """Preferences for how events are delivered."""

    @_abc.abstractmethod
    def trace_event(self, event: Event) -> None:
        """Consume one event. Must not raise."""
