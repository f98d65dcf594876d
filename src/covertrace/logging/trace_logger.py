"""
Trace logger for covertrace.

Writes the tracer's diagnostic stream to a JSONL file for debugging. The
records are informational only; their shape is not a stable interface.
"""

import datetime as _datetime
import json as _json
import pathlib as _pathlib
import threading as _threading
import typing as _typing


class TraceLogger:
    """
    Logs coverage tracing activity to a JSONL file.

    Each line in the file is a JSON object representing a record:
    - run_start: Logger opened
    - decorated: A document node was tagged with its path
    - unify: A unification was observed (both sides, resolved)
    - equality: An equality test was observed
    - builtin: A built-in call was observed (operator and operands)
    - covered: A new path entered the coverage set
    - dropped: An event or path was skipped because of an error
    - run_end: Logger closed

    Usage:
        logger = TraceLogger(log_file="/tmp/coverage-trace.jsonl")
        tracer = CoverageTracer(trace_logger=logger)
        ...
        logger.close()
    """

    def __init__(
        self,
        *,
        log_file: _pathlib.Path | str | None = None,
        enabled: bool = True,
    ) -> None:
        """
        Initialize the trace logger.

        Args:
            log_file: JSONL file to write. Parent directories are created.
                No file means the logger is disabled.
            enabled: Whether logging is enabled.
        """
        self._enabled = enabled and log_file is not None
        self._file: _typing.TextIO | None = None
        self._file_path: _pathlib.Path | None = None
        self._record_count = 0
        self._lock = _threading.Lock()

        if not self._enabled:
            return

        self._file_path = _pathlib.Path(_typing.cast(str, log_file))
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        # Held as instance state, closed in close()
        self._file = open(self._file_path, "w", encoding="utf-8")  # noqa: SIM115

        self._write_record("run_start", {})

    def _write_record(
        self,
        record_type: str,
        data: dict[str, _typing.Any],
    ) -> None:
        """Write a record to the log file."""
        if not self._enabled:
            return

        # Lines appear in record_number order
        with self._lock:
            if not self._file:
                return

            self._record_count += 1
            record = {
                "timestamp": _datetime.datetime.now().isoformat(),
                "record_number": self._record_count,
                "record_type": record_type,
                **data,
            }

            try:
                self._file.write(_json.dumps(record, default=str) + "\n")
                self._file.flush()
            except OSError:
                # Diagnostics must never break evaluation
                pass

    def log_decorated(self, path: _typing.Sequence[_typing.Any], origin: str) -> None:
        """Log a document node being tagged."""
        self._write_record("decorated", {"path": list(path), "origin": origin})

    def log_unify(self, lhs: str, rhs: str) -> None:
        """Log an observed unification."""
        self._write_record("unify", {"lhs": lhs, "rhs": rhs})

    def log_equality(self, lhs: str, rhs: str) -> None:
        """Log an observed equality test."""
        self._write_record("equality", {"lhs": lhs, "rhs": rhs})

    def log_builtin(self, operator: str, operands: list[str]) -> None:
        """Log an observed built-in call."""
        self._write_record("builtin", {"operator": operator, "operands": operands})

    def log_covered(self, path: _typing.Sequence[_typing.Any]) -> None:
        """Log a path newly added to the coverage set."""
        self._write_record("covered", {"path": list(path)})

    def log_dropped(self, reason: str, detail: dict[str, _typing.Any] | None = None) -> None:
        """Log something the tracer skipped."""
        self._write_record("dropped", {"reason": reason, **(detail or {})})

    @property
    def file_path(self) -> _pathlib.Path | None:
        """Get the log file path."""
        return self._file_path

    @property
    def enabled(self) -> bool:
        """Check if logging is enabled."""
        return self._enabled

    @property
    def record_count(self) -> int:
        return self._record_count

    def close(self) -> None:
        """Close the log file."""
        if not self._enabled or not self._file:
            return

        self._write_record("run_end", {"total_records": self._record_count})

        with self._lock:
            if self._file is None:
                return
            try:
                self._file.close()
            except OSError:
                pass
            finally:
                self._file = None

    def __enter__(self) -> "TraceLogger":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: _typing.Any,
    ) -> None:
        """Context manager exit."""
        if exc_type:
            self.log_dropped("exception", {"error": f"{exc_type.__name__}: {exc_val}"})
        self.close()


def read_trace_log(path: _pathlib.Path | str) -> list[dict[str, _typing.Any]]:
    """
    Read a JSONL trace log back into a list of records.

    Blank lines and lines that are not JSON objects are skipped.
    """
    records: list[dict[str, _typing.Any]] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = _json.loads(line)
            except ValueError:
                continue
            if isinstance(record, dict):
                records.append(record)
    return records
