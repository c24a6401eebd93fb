"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from dayplanner.core.context import get_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"

# Third-party loggers that are chatty at INFO during completion calls.
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


class RequestIdFilter(logging.Filter):
    """Stamp every record with the request id bound in the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def configure_logging(*, log_level: str = "INFO", debug: bool = False) -> None:
    """Install the console handler once; ``debug`` opens up the dayplanner loggers only."""
    if getattr(configure_logging, "_configured", False):
        return

    package_level = "DEBUG" if debug else log_level
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "filters": {"request_id": {"()": RequestIdFilter}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["request_id"],
                }
            },
            "loggers": {
                "dayplanner": {"level": package_level},
                **{name: {"level": "WARNING"} for name in NOISY_LOGGERS},
            },
            "root": {"handlers": ["console"], "level": log_level},
        }
    )

    logging.getLogger(__name__).debug("Logging configured (root=%s, dayplanner=%s)", log_level, package_level)
    setattr(configure_logging, "_configured", True)
