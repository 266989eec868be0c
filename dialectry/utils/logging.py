"""
Logging setup for dialectry.

Library modules log through ``logging.getLogger(__name__)`` and stay
silent until an application configures the ``dialectry`` logger. The
command line does that with configure_logging(), turning its -v/-q count
into a level.
"""

import logging
import sys
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional

from dialectry.core.types import VerbosityLevel

ROOT_LOGGER_NAME = "dialectry"


class LogLevel(IntEnum):
    """Log levels reachable from the command line verbosity."""

    TRACE = 5  # -vvv, every resolution
    DEBUG = 10  # -vv
    INFO = 20  # -v
    WARN = 30  # default
    ERROR = 40  # -q
    FATAL = 50  # -qq


logging.addLevelName(LogLevel.TRACE, "TRACE")

_LEVELS_BY_VERBOSITY = (
    LogLevel.FATAL,
    LogLevel.ERROR,
    LogLevel.WARN,
    LogLevel.INFO,
    LogLevel.DEBUG,
    LogLevel.TRACE,
)


def verbosity_to_level(verbosity: VerbosityLevel) -> LogLevel:
    """
    Map a verbosity count onto a log level.

    Args:
        verbosity: Number of -v flags minus number of -q flags; values
            outside -2..3 are clamped

    Returns:
        Corresponding log level
    """
    return _LEVELS_BY_VERBOSITY[max(-2, min(3, verbosity)) + 2]


class DialectryFormatter(logging.Formatter):
    """
    Formatter for dialectry log records.

    Console records are the bare message, with a level prefix on warnings
    and worse and ANSI colors on a terminal. Log files add a timestamp.
    """

    COLORS = {
        LogLevel.TRACE: "\033[90m",  # Dark gray
        LogLevel.DEBUG: "\033[36m",  # Cyan
        LogLevel.WARN: "\033[33m",  # Yellow
        LogLevel.ERROR: "\033[31m",  # Red
        LogLevel.FATAL: "\033[91m",  # Bright red
    }
    RESET = "\033[0m"

    def __init__(
        self,
        show_level: bool = False,
        show_timestamps: bool = False,
        use_colors: bool = False,
    ) -> None:
        super().__init__()
        self.show_level = show_level
        self.show_timestamps = show_timestamps
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        parts = []

        if self.show_timestamps:
            created = datetime.fromtimestamp(record.created)
            parts.append(created.strftime("[%Y-%m-%d %H:%M:%S]"))

        if self.show_level and record.levelno >= logging.WARNING:
            parts.append(f"{record.levelname.lower()}:")

        parts.append(record.getMessage())
        message = " ".join(parts)

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        color = self.COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{message}{self.RESET}" if color else message


def _stderr_is_terminal() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def configure_logging(
    verbosity: VerbosityLevel = 0, log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Send dialectry log records to stderr and, optionally, a file.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        verbosity: Verbosity level for the console
        log_file: Optional file that receives every record down to TRACE

    Returns:
        The configured ``dialectry`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = verbosity_to_level(verbosity)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(
        DialectryFormatter(show_level=verbosity >= 1, use_colors=_stderr_is_terminal())
    )
    logger.addHandler(console)
    logger.setLevel(level)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(LogLevel.TRACE)
        file_handler.setFormatter(
            DialectryFormatter(show_level=True, show_timestamps=True)
        )
        logger.addHandler(file_handler)
        logger.setLevel(LogLevel.TRACE)

    logger.propagate = False
    return logger
