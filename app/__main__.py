"""Run the gateway with uvicorn: ``python -m app``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from logging_config import configure_logging
from settings import MissingSettingError, get_settings

logger = logging.getLogger("app")

_UVICORN_LEVEL_ALIASES = {"WARN": "warning", "FATAL": "critical"}


def uvicorn_log_level(level: str) -> str:
    """Translate a logging level name into one uvicorn accepts."""
    candidate = level.strip().upper()
    return _UVICORN_LEVEL_ALIASES.get(candidate, candidate.lower())


def run() -> None:
    configure_logging()
    try:
        settings = get_settings()
    except MissingSettingError as exc:
        logger.critical(str(exc))
        sys.exit(1)

    logger.info("Server starting on port %s", settings.port)
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=uvicorn_log_level(settings.log_level),
    )


if __name__ == "__main__":
    run()
