"""
CLI module for covertrace.

Provides the command-line interface using Click.
"""

from covertrace.cli.main import cli, main

__all__ = ["main", "cli"]
