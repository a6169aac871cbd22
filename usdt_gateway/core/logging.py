"""Logging setup shared by the web app and the CLI."""

from __future__ import annotations

import logging.config

from usdt_gateway.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.logging.format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # SQL echo is controlled by DatabaseSettings.echo
                "sqlalchemy.engine": {"level": "WARNING"},
                "aiohttp.access": {"level": "WARNING"},
            },
        }
    )


__all__ = ["configure_logging"]
