"""Loguru sink configuration for host applications embedding the engine."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from config import Settings, get_settings

LOG_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Replace the default loguru sink with stderr (and optionally a file) at the configured level."""
    settings = settings or get_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
