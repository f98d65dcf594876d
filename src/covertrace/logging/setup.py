"""Standard logging setup for command-line use."""

import logging as _logging
import sys as _sys

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def configure_logging(level: str = "warning") -> None:
    """
    Configure the root logger to write to stderr.

    Library code only creates module loggers; handlers are set up here, by
    the command line, and nowhere else.

    Args:
        level: Level name (debug, info, warning, error), case-insensitive.

    Raises:
        ValueError: If the level name is unknown.
    """
    numeric = _logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    _logging.basicConfig(level=numeric, format=_FORMAT, stream=_sys.stderr, force=True)
