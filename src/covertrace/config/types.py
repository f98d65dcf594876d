"""Configuration type definitions for covertrace settings.

This module defines the Pydantic models used to represent configuration
sections nested within the main Settings class:

- CoverageConfig: report mode, diagnostics, dedicated provenance tagging
- LoggingConfig: log level, JSONL trace file

Design decision: All types use `extra="allow"` to preserve unknown fields.
This lets users audit their config for typos and unknown keys. Use
`collect_all_extra_fields()` to inspect them.
"""

import typing as _typing

import pydantic as _pydantic

import covertrace.constants as _constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    All config types use `extra="allow"` so unknown fields are preserved
    rather than silently dropped. This enables auditing for typos.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Return fields that were provided but not in the schema.

        Returns:
            Dict of field_name → value for all unrecognized fields.
        """
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"coverage.reprot": "leaves", "logging.lvl": "debug"}

        Args:
            prefix: Dotted path prefix (used in recursion).

        Returns:
            Flat dict of path → value for all unrecognized fields.
        """
        result: dict[str, _typing.Any] = {}

        for key, value in self.get_extra_fields().items():
            path = f"{prefix}.{key}" if prefix else key
            result[path] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = f"{prefix}.{field_name}" if prefix else field_name
                result.update(value.collect_all_extra_fields(child_prefix))

        return result


# =============================================================================
# Coverage Settings
# =============================================================================


class CoverageConfig(ConfigBase):
    """
    Coverage tracing behavior.

    YAML section: coverage.*
    """

    report: _typing.Literal["recorded", "leaves"] = _constants.DEFAULT_REPORT_MODE
    """Which paths covered() reports.

    recorded: every path observed, including one that is a prefix of another.
    leaves: only the deepest observed paths.
    """

    diagnostics: bool = False
    """Log a line for every unification, equality test and built-in call."""

    provenance: bool = True
    """Also store each node's path in the term's dedicated provenance slot."""


# =============================================================================
# Logging Settings
# =============================================================================


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = "warning"
    """Log level for the command line."""

    trace_file: str | None = None
    """JSONL file for the tracer's diagnostic records. None = disabled."""
