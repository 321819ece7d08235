"""Logging setup shared by the command layer, the HTTP client, and the shell entry point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone
from logging.config import dictConfig
from typing import Optional
from zoneinfo import ZoneInfo


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
QUIET_LOGGERS = ("httpx", "httpcore")


class _TimezoneFormatter(logging.Formatter):
    """Formatter that applies an optional IANA timezone to timestamps."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, timezone: Optional[str] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.tzinfo = ZoneInfo(timezone) if timezone else None

    def formatTime(self, record, datefmt=None):  # noqa: N802 - override signature
        created = datetime.fromtimestamp(record.created, tz=dt_timezone.utc)
        if self.tzinfo:
            created = created.astimezone(self.tzinfo)
        return created.strftime(datefmt) if datefmt else created.isoformat()


def configure_logging(
    log_level: str = "INFO",
    timezone: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging for every command invocation.

    Safe to call more than once: existing handlers are replaced. Console output
    goes to stderr because stdout is reserved for document text when the
    commands run from a shell. When ``log_file`` is given, the same records are
    also appended to that file. The HTTP client loggers stay at WARNING so
    request lines (and their headers) never reach the log.
    """

    normalized_level = getattr(logging, log_level.upper(), logging.INFO)
    formatter_factory = {
        "()": _TimezoneFormatter,
        "fmt": DEFAULT_FORMAT,
        "datefmt": DEFAULT_DATE_FORMAT,
    }
    if timezone:
        formatter_factory["timezone"] = timezone

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": normalized_level,
            "stream": "ext://sys.stderr",
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "level": normalized_level,
            "filename": log_file,
            "encoding": "utf-8",
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": formatter_factory},
            "handlers": handlers,
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
            "root": {
                "handlers": list(handlers),
                "level": normalized_level,
            },
        }
    )

    logging.captureWarnings(True)
