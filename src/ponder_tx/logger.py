#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

This module configures the handlers/formatters of the library's loggers.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime as dt

import colorlog

from .version import VERSION

DEFAULT_FMT = "%(asctime)s.%(msecs)03d %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

CONSOLE_FMT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOGFILE_FMT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

LOG_COLOURS = {
    "DEBUG": "white",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red",
}  # default_log_colors


class _Formatter:  # format asctime with configurable precision
    """Formatter instances convert a LogRecord to text."""

    converter = None  # was: time.localtime
    default_time_format = "%Y-%m-%dT%H:%M:%S.%f"
    precision = 3

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Return the creation time (asctime) of the LogRecord as formatted text.

        Allows for sub-millisecond precision, using datetime instead of time objects.
        """
        result = dt.fromtimestamp(record.created).strftime(
            datefmt or self.default_time_format
        )
        if "f" not in self.default_time_format:
            return result
        precision = self.precision or -1
        return result[: precision - 6] if -1 <= precision < 6 else result


class ColoredFormatter(_Formatter, colorlog.ColoredFormatter):  # type: ignore[misc]
    pass


class Formatter(_Formatter, logging.Formatter):  # type: ignore[misc]
    pass


class StdErrFilter(logging.Filter):  # record.levelno >= logging.WARNING
    """For sys.stderr, process only warnings and worse."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record is to be processed."""  # WARNING-30, ERROR-40
        return record.levelno >= logging.WARNING


class StdOutFilter(logging.Filter):  # record.levelno < logging.WARNING
    """For sys.stdout, process only info and debug."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record is to be processed."""  # INFO-20, DEBUG-10
        return record.levelno < logging.WARNING


def set_logging(
    logger: logging.Logger,
    cc_console: bool = True,
    file_name: str | None = None,
    rotate_backups: int = 0,
    rotate_bytes: int | None = None,
    debug_mode: bool = False,
) -> None:
    """Create/configure handlers, formatters, etc.

    Parameters:
    - cc_console:     log to stdout (< WARNING) and stderr (>= WARNING)
    - file_name:      also log to this file, rotated at midnight if rotate_backups,
                      or when it exceeds rotate_bytes
    - debug_mode:     log at DEBUG, rather than INFO
    """

    logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    # as set_logging() may be called several times: to avoid duplicates in logs...
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if file_name:
        handler: logging.Handler
        if rotate_bytes:
            handler = logging.handlers.RotatingFileHandler(
                file_name, maxBytes=rotate_bytes, backupCount=rotate_backups or 2
            )
        elif rotate_backups:
            handler = logging.handlers.TimedRotatingFileHandler(
                file_name, when="MIDNIGHT", backupCount=rotate_backups
            )
        else:
            handler = logging.FileHandler(file_name)

        handler.setFormatter(Formatter(fmt=LOGFILE_FMT))
        logger.addHandler(handler)

    if cc_console:  # CC: output to stdout/stderr
        console_fmt = ColoredFormatter(
            fmt=f"%(log_color)s{CONSOLE_FMT}", reset=True, log_colors=LOG_COLOURS
        )

        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(console_fmt)
        handler.setLevel(logging.WARNING)
        handler.addFilter(StdErrFilter())  # record.levelno >= .WARNING
        logger.addHandler(handler)

        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(console_fmt)
        handler.setLevel(logging.DEBUG)
        handler.addFilter(StdOutFilter())  # record.levelno < .WARNING
        logger.addHandler(handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.info("ponder %s", VERSION)  # initial log line
