"""
Configuration module for covertrace.

Uses pydantic-settings for environment variable loading and layered YAML
files for persistent configuration.
"""

from covertrace.config.settings import Settings, find_project_root
from covertrace.config.sources import ConfigFileError
from covertrace.config.types import CoverageConfig, LoggingConfig

__all__ = [
    "ConfigFileError",
    "CoverageConfig",
    "LoggingConfig",
    "Settings",
    "find_project_root",
]
