#!/usr/bin/env python3
"""Ponder - Test the configuration of the loggers."""

import logging
import logging.handlers
from pathlib import Path

from ponder_tx import set_logging
from ponder_tx.logger import StdErrFilter, StdOutFilter


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("ponder", level, __file__, 1, "msg", None, None)


def test_console_filters() -> None:
    assert StdErrFilter().filter(_record(logging.WARNING))
    assert not StdErrFilter().filter(_record(logging.INFO))
    assert StdOutFilter().filter(_record(logging.DEBUG))
    assert not StdOutFilter().filter(_record(logging.ERROR))


def test_set_logging(tmp_path: Path) -> None:
    logger = logging.getLogger("ponder.test_logger")
    log_file = tmp_path / "ponder.log"

    set_logging(logger, file_name=str(log_file), rotate_backups=7, debug_mode=True)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 3
    assert isinstance(logger.handlers[0], logging.handlers.TimedRotatingFileHandler)

    set_logging(logger, cc_console=False)  # handlers are replaced, not added

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)
