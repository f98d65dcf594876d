"""
Shared constants for covertrace.

This module provides a single source of truth for values that are used
across multiple modules.
"""

PATH_MARKER = "path:"
"""Prefix that marks an origin string as an encoded document path.

Origin attributes carry arbitrary strings (usually a policy file name), so
only strings starting with this marker are treated as path tags.
"""

EQUALITY_OPERATORS = frozenset({"eq", "equal"})
"""Operator names that denote a two-operand equality test."""

DEFAULT_REPORT_MODE = "recorded"
"""Default enumeration mode for the covered-path set."""

CONFIG_DIR_NAME = "covertrace"
"""Directory name used under ~/.config for user configuration."""

PROJECT_CONFIG_DIR = ".covertrace"
"""Directory holding project-level configuration."""
