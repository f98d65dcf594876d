"""
Diagnostic logging for covertrace.

Provides JSONL logging of the tracer's activity and the standard logging
setup used by the command line.
"""

from covertrace.logging.setup import configure_logging
from covertrace.logging.trace_logger import TraceLogger, read_trace_log

__all__ = ["TraceLogger", "configure_logging", "read_trace_log"]
