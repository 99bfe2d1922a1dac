"""Logging setup.

OAuth secrets must never reach the log stream: values passed through
``extra=`` under a sensitive key are masked, and the httpx request log (which
would echo every Slack API URL) is kept at WARNING.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

from slack_login.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

SENSITIVE_KEYS = frozenset({
    "access_token",
    "client_secret",
    "code",
    "code_verifier",
    "refresh_token",
    "token",
})
REDACTED = "***"


def redact(extra: dict[str, Any]) -> dict[str, Any]:
    """Mask sensitive values, recursing into nested mappings."""
    cleaned: dict[str, Any] = {}
    for key, value in extra.items():
        if key.lower() in SENSITIVE_KEYS and value:
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = redact(value)
        else:
            cleaned[key] = value
    return cleaned


class RedactingFilter(logging.Filter):
    """Masks sensitive ``extra=`` attributes before any formatter sees them."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in SENSITIVE_KEYS:
            if getattr(record, key, None):
                setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in payload and key not in _RESERVED_ATTRS
        }
        if extra:
            payload["extra"] = redact(extra)
        return json.dumps(payload, default=str)


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactingFilter())
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(effective_level, logging.WARNING))
