"""Logging bootstrap for the remote panel."""
from __future__ import annotations

from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    """Route panel, uvicorn and websockets logs through one console handler."""

    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                }
            },
            "loggers": {
                "websockets": {"level": "INFO" if level == "DEBUG" else level},
                "uvicorn.error": {"level": level},
                "uvicorn.access": {"level": "WARNING"},
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )


__all__ = ["configure_logging"]
