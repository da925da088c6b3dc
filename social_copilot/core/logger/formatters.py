"""
Formatters: JSON lines for the rotating file, plain text for the console.

Both run the rendered message (and any traceback) through redact_secrets so
a provider error that echoes an API key never reaches a log sink verbatim.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from social_copilot.core.redact import redact_secrets


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for aggregation and parsing."""

    def __init__(self, *, include_extra: bool = True, redact: bool = True) -> None:
        super().__init__()
        self.include_extra = include_extra
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
        }
        if record.exc_info:
            log_dict["exception"] = self._clean(
                "".join(traceback.format_exception(*record.exc_info)).strip()
            )
        if record.lineno:
            log_dict["lineno"] = record.lineno
        # logger.info("...", extra={"extra": {...}})
        if self.include_extra and getattr(record, "extra", None):
            log_dict["extra"] = record.extra
        return json.dumps(log_dict, default=str, ensure_ascii=False)

    def _clean(self, text: str) -> str:
        return redact_secrets(text) if self.redact else text


def _utc_iso(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat()


class PlainConsoleFormatter(logging.Formatter):
    """Human-readable format for console."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        *,
        redact: bool = True,
    ) -> None:
        if fmt is None:
            fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        if datefmt is None:
            datefmt = "%Y-%m-%d %H:%M:%S"
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        return redact_secrets(text) if self.redact else text
