"""
Trace-event consumers for covertrace.

The coverage tracer observes the events a policy evaluation engine emits
and records which input-document paths were read as concrete values.

Example usage:
    import covertrace.terms as terms
    import covertrace.tracing as tracing

    document = terms.from_python({"a": [1, 2], "b": "x"})
    tracer = tracing.CoverageTracer()
    tracer.decorate(document)

    # the engine calls tracer.trace_event(...) while evaluating

    tracer.covered()  # [("a", 1), ("b",)]
"""

from covertrace.tracing.coverage import CoverageTracer, extract_path
from covertrace.tracing.decorator import DocumentDecorator, decorate_document
from covertrace.tracing.events import (
    Event,
    EventOp,
    QueryTracer,
    TraceConfig,
)

__all__ = [
    "CoverageTracer",
    "DocumentDecorator",
    "Event",
    "EventOp",
    "QueryTracer",
    "TraceConfig",
    "decorate_document",
    "extract_path",
]
