"""Structured logging for the devkit.

Records are written to stderr as one JSON object per line. Whatever a caller
passes through ``extra=`` ends up under ``context``; keys that look like
credentials are blanked before the record is formatted.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SENSITIVE_KEYS = frozenset({"password", "pwd", "secret", "token"})
REDACTED_VALUE = "***REDACTED***"
HANDLER_NAME = "webapp-devkit"

# Attribute names every LogRecord carries, so anything else came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def parse_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"INFO"`` or a numeric level into a logging level."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"Unknown log level {value!r}; expected one of {', '.join(LEVEL_NAMES)}")
    return getattr(logging, name)


def _is_sensitive(key: str) -> bool:
    return key.lower() in SENSITIVE_KEYS


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: REDACTED_VALUE if _is_sensitive(key) else value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Blank out credentials passed as ``extra`` fields or mapping-style args."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for key in list(vars(record)):
            if key not in _RECORD_ATTRS and _is_sensitive(key):
                setattr(record, key, REDACTED_VALUE)
        if isinstance(record.args, Mapping):
            record.args = {
                key: REDACTED_VALUE if _is_sensitive(str(key)) else value
                for key, value in record.args.items()
            }
        return True


class JsonFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Paths, handles and other objects fall back to str().
        return json.dumps(entry, ensure_ascii=True, default=str)


def configure_logging(level: int | str | None = logging.INFO) -> logging.Logger:
    """Set the root level and attach the JSON stderr handler once.

    An unknown level name raises ``ValueError``. When the root logger already
    has a stream handler (a test runner's capture handler, say) no second one
    is added.
    """
    root = logging.getLogger()
    root.setLevel(parse_level(level))

    if not _has_stream_handler(root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(JsonFormatter())
        # Logger-level filters skip records propagated from child loggers.
        handler.addFilter(SensitiveDataFilter())
        root.addHandler(handler)

    return root


def _has_stream_handler(handlers: list[logging.Handler]) -> bool:
    return any(isinstance(handler, logging.StreamHandler) for handler in handlers)


__all__ = [
    "JsonFormatter",
    "SensitiveDataFilter",
    "configure_logging",
    "parse_level",
    "record_context",
    "LEVEL_NAMES",
    "REDACTED_VALUE",
]
