"""Logging configuration using loguru.

Intercepts stdlib logging so that libraries logging through ``logging``
(pexpect, PIL via customtkinter, ...) flow through loguru with one format.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk the call stack so loguru reports the real call-site
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure loguru as the sole logging sink.

    Call this once at process startup, before the GUI is built.
    """
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                log_file,
                level=level,
                format=_FORMAT,
                rotation="5 MB",
                retention=3,
                enqueue=True,
            )
        except OSError as exc:
            logger.warning("File logging disabled ({}): {}", log_file, exc)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    logger.info("Logging initialised (level={})", level)
