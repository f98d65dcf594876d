"""
Coverage tracer - records which document paths a policy evaluation read.

The CoverageTracer plugs into the engine's trace-event stream. For each
unification, equality test and built-in call it resolves the terms
involved, keeps the ground ones that carry a document path, and adds those
paths to a private prefix tree. After the run, ``covered()`` lists them.

Observing coverage must never change evaluation: failures while handling an
event are logged and the event is skipped.
"""

from __future__ import annotations

import logging as _logging
import threading as _threading
import typing as _typing

import covertrace.codec as codec
import covertrace.config.types as config_types
import covertrace.paths as paths
import covertrace.terms.builtins as builtins
import covertrace.terms.values as values
import covertrace.tracing.decorator as decorator
import covertrace.tracing.events as events
import covertrace.trie as trie

if _typing.TYPE_CHECKING:
    import covertrace.logging.trace_logger as trace_logger

_logger = _logging.getLogger(__name__)


def extract_path(term: values.Term | None) -> paths.Path | None:
    """
    Get the document path carried by a term, if any.

    The dedicated provenance slot wins; otherwise the origin string is
    decoded. Terms whose origin is an ordinary file name yield None.
    """
    if term is None:
        return None
    if term.provenance is not None:
        return term.provenance
    if term.location is None:
        return None
    return codec.decode_path(term.location.file)


class CoverageTracer(events.QueryTracer):
    """
    Query tracer that collects covered document paths.

    Lifecycle: construct, decorate the input document (``decorate``), hand
    the tracer to the engine, and call ``covered()`` once evaluation has
    finished. ``clear()`` resets it for another run.

    Access to the path set is serialized with a lock, so engines that
    evaluate on several workers may share one tracer.
    """

    def __init__(
        self,
        options: config_types.CoverageConfig | None = None,
        *,
        builtins_registry: builtins.BuiltinRegistry | None = None,
        trace_logger: trace_logger.TraceLogger | None = None,
    ) -> None:
        """
        Initialize the tracer.

        Args:
            options: Coverage settings. Defaults to CoverageConfig().
            builtins_registry: The engine's built-in functions. Defaults to
                the standard set.
            trace_logger: Optional JSONL logger for diagnostic records.
        """
        self._options = options if options is not None else config_types.CoverageConfig()
        self._builtins = (
            builtins_registry if builtins_registry is not None else builtins.BuiltinRegistry()
        )
        self._trace_logger = trace_logger
        self._paths = trie.PathTrie()
        self._lock = _threading.Lock()
        self._handlers: dict[events.EventOp, _typing.Callable[[events.Event], None]] = {
            events.EventOp.UNIFY: self._trace_unify,
            events.EventOp.EVAL: self._trace_eval,
        }

    # =========================================================================
    # QueryTracer contract
    # =========================================================================

    def enabled(self) -> bool:
        """Always enabled; observing is the tracer's only job."""
        return True

    def config(self) -> events.TraceConfig:
        """
        Decline eager substitution of local variables.

        Substituting every variable into every event is costly and the
        tracer inspects only a few terms per event, which it resolves
        itself through ``Event.plug``.
        """
        return events.TraceConfig(plug_local_vars=False)

    def trace_event(self, event: events.Event) -> None:
        """
        Handle one trace event.

        Unify and eval events are inspected; every other kind is ignored.
        Never raises.
        """
        if not event.op.carries_values:
            return
        handler = self._handlers[event.op]

        try:
            handler(event)
        except Exception as e:
            _logger.warning(
                "Coverage tracing skipped %s event for %s: %s",
                event.op.value,
                event.node,
                e,
            )
            if self._trace_logger is not None:
                self._trace_logger.log_dropped(
                    "event_error",
                    {"event": event.to_dict(), "error": f"{type(e).__name__}: {e}"},
                )

    # =========================================================================
    # Public API
    # =========================================================================

    def decorate(self, root: values.Term | values.Value) -> int:
        """
        Tag an input document with node paths before evaluation.

        Returns:
            Number of terms tagged.

        Raises:
            codec.PathEncodeError: If a path cannot be encoded.
        """
        document_decorator = decorator.DocumentDecorator(
            provenance=self._options.provenance,
            trace_logger=self._trace_logger,
        )
        return document_decorator.decorate(root)

    def covered(self) -> list[paths.Path]:
        """
        List the document paths observed as ground values.

        Order is unspecified. With no coverage at all the result is
        ``[()]``, the root path.
        """
        leaves_only = self._options.report == "leaves"
        with self._lock:
            return self._paths.paths(leaves_only=leaves_only)

    def covers(self, path: _typing.Sequence[_typing.Any]) -> bool:
        """Whether ``path`` or one of its ancestors was observed."""
        with self._lock:
            return self._paths.covers(path)

    def clear(self) -> None:
        """Forget everything observed so far."""
        with self._lock:
            self._paths.clear()

    # =========================================================================
    # Event handlers
    # =========================================================================

    def _trace_unify(self, event: events.Event) -> None:
        expr = event.node
        if not isinstance(expr, values.Expr) or len(expr.operands()) != 2:
            return

        lhs, rhs = (event.plug(term) for term in expr.operands())
        if self._options.diagnostics:
            _logger.info("TraceUnify: %s = %s", lhs, rhs)
        if self._trace_logger is not None:
            self._trace_logger.log_unify(str(lhs), str(rhs))

        self._record(lhs)
        self._record(rhs)

    def _trace_eval(self, event: events.Event) -> None:
        expr = event.node
        if not isinstance(expr, values.Expr) or not expr.is_call():
            return

        if expr.is_equality():
            lhs, rhs = (event.plug(term) for term in expr.operands())
            if self._options.diagnostics:
                _logger.info("TraceEquality: %s = %s", lhs, rhs)
            if self._trace_logger is not None:
                self._trace_logger.log_equality(str(lhs), str(rhs))
            self._record(lhs)
            self._record(rhs)

        operator = expr.operator_name()
        if self._builtins.is_builtin(operator):
            operands = [event.plug(term) for term in expr.operands()]
            if self._options.diagnostics:
                _logger.info(
                    "TraceEval: %s(%s)",
                    operator,
                    ", ".join(str(term) for term in operands),
                )
            if self._trace_logger is not None:
                self._trace_logger.log_builtin(
                    _typing.cast(str, operator),
                    [str(term) for term in operands],
                )
            for term in operands:
                self._record(term)

    def _record(self, term: values.Term | None) -> None:
        """Add the term's document path to the set if the term is ground."""
        if term is None or not term.is_ground():
            return

        path = extract_path(term)
        if path is None:
            return

        with self._lock:
            added = self._paths.add(path)

        if added:
            _logger.debug("Covered %s", paths.format_path(path))
            if self._trace_logger is not None:
                self._trace_logger.log_covered(path)
