# ABOUTME: Configures process-wide logging for the study coach CLI.
# ABOUTME: Routes records through rich so they sit alongside console tables.

import os
from logging.config import dictConfig
from typing import Optional

DEFAULT_LOG_FORMAT = "%(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a RichHandler on the root logger; level falls back to STUDY_COACH_LOG_LEVEL."""

    resolved = (level or os.getenv("STUDY_COACH_LOG_LEVEL", "WARNING")).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                    "datefmt": "[%X]",
                },
            },
            "handlers": {
                "default": {
                    "class": "rich.logging.RichHandler",
                    "formatter": "default",
                    "rich_tracebacks": True,
                    "show_path": False,
                },
            },
            "root": {
                "handlers": ["default"],
                "level": resolved,
            },
        }
    )
