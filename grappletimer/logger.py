"""Logging setup shared by the runner and tests."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "grappletimer"


def configure_logging(
        level=logging.INFO,
        log_dir: Path | None = None,
        console=True,
        max_bytes=5 * 1024 * 1024,
        backup_count=5,
) -> logging.Logger:
    """Attach handlers to the package logger.  Safe to call repeatedly."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.propagate = False
    logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    file_handler_name = f"{ROOT_LOGGER}:file"
    if log_dir is not None and not any(h.get_name() == file_handler_name for h in logger.handlers):
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_dir / f"{ROOT_LOGGER}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        file_handler.set_name(file_handler_name)
        logger.addHandler(file_handler)

    console_handler_name = f"{ROOT_LOGGER}:console"
    if console and not any(h.get_name() == console_handler_name for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(fmt)
        console_handler.set_name(console_handler_name)
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
