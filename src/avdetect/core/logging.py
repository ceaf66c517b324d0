"""Logging configuration for avdetect.

This module provides the log formatter and the configuration helper used by
the command line entry point.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(threadName)-15s] %(levelname)-5s %(filename)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class MillisecondFormatter(logging.Formatter):
    """Custom formatter that includes milliseconds in timestamps.

    This formatter extends logging.Formatter to include milliseconds
    in the timestamp, even when a custom datefmt is specified.
    """

    def formatTime(self, record, datefmt=None):
        """Format the time with milliseconds.

        Args:
            record: LogRecord instance
            datefmt: Date format string

        Returns:
            Formatted timestamp string with milliseconds
        """
        ct = self.converter(record.created)
        s = time.strftime(datefmt or DATE_FORMAT, ct)
        return f"{s}.{int(record.msecs):03d}"


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure application-wide logging.

    Log format: YYYY-MM-DD HH:MM:SS.mmm [ThreadName     ] LEVEL  filename.py:line - message

    Console output goes to stderr so that JSON printed on stdout stays clean.
    When ``log_file`` is given, everything down to DEBUG is also written there.

    Args:
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = MillisecondFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except (OSError, PermissionError) as e:
            # If we can't create the log file, print a warning but continue
            print(f"Warning: Could not create log file {log_file}: {e}", file=sys.stderr)
            log_file = None

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(numeric_level)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    # Clear existing handlers and configure manually for better control
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if log_file is not None else numeric_level)

    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized at level {log_level}")
    if log_file is not None:
        logger.debug(f"Log file: {Path(log_file).absolute()}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Detection started")
    """
    return logging.getLogger(name)
