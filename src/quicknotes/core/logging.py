"""
Logging Configuration

Single-stream console logging for the notes service. Application records
go out under the ``quicknotes`` namespace; chatty libraries are held at
WARNING unless explicitly opened up through settings.
"""

import sys
from logging.config import dictConfig

from quicknotes.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _library_loggers(app_level: str) -> dict[str, dict]:
    """Per-library overrides, all routed to the console without propagating."""
    levels = {
        "uvicorn": "INFO",
        "uvicorn.access": "INFO",
        # INFO on the engine logger prints every statement
        "sqlalchemy.engine": "INFO" if settings.LOG_SQL else "WARNING",
        # One INFO line per Gemini request; only useful while debugging
        "httpx": "DEBUG" if app_level == "DEBUG" else "WARNING",
    }
    return {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name, level in levels.items()
    }


def setup_logging() -> None:
    """
    Configure logging for the API process.

    Configuration:
        - Output: stdout
        - Format: Timestamp | Level | Logger | Message
        - Level: LOG_LEVEL for ``quicknotes.*``; LOG_SQL opens up SQL echo

    Note:
        Called at import time in ``quicknotes.main`` so that lifespan
        messages are already formatted.
    """
    log_level = settings.LOG_LEVEL.upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
            },
            "root": {"level": log_level, "handlers": ["console"]},
            "loggers": {
                "quicknotes": {
                    "level": log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
                **_library_loggers(log_level),
            },
        }
    )
