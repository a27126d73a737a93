"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import LoggingSettings

STRUCTURED_FORMAT = (
    "time=%(asctime)s level=%(levelname)s logger=%(name)s message=%(message)r"
)
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _formatter(settings: LoggingSettings) -> dict[str, Any]:
    """Return the dictConfig formatter fragment for ``settings``.

    Structured records are single-line ``key=value`` pairs; the message is
    quoted so embedded spaces and newlines stay inside one field.
    """
    if settings.structured:
        return {"format": STRUCTURED_FORMAT, "datefmt": "%Y-%m-%dT%H:%M:%S%z"}
    return {"format": PLAIN_FORMAT}


def configure_logging(settings: LoggingSettings) -> None:
    """Install a console handler on the root logger at the configured level."""
    level = settings.level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter(settings)},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                },
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )


__all__ = ["PLAIN_FORMAT", "STRUCTURED_FORMAT", "configure_logging"]
