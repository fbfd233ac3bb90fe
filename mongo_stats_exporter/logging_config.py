# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Logging setup with structured JSON output."""

import json
import logging
import sys
from datetime import datetime, timezone

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {key: value for key, value in vars(record).items() if key not in _RESERVED}
        if extra:
            log_entry["extra"] = extra
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_entry, default=str)
        except (TypeError, ValueError) as e:
            return f"{record.levelname}: {record.getMessage()} (JSON serialization failed: {e})"


def configure_logging(level: str = "INFO", log_type: str = "stdout") -> logging.Handler:
    """Install a stdout handler on the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_type: "stdout" for JSON lines, "text" for plain text

    Returns:
        The installed handler

    Raises:
        ValueError: If the level or log type is not recognized
    """
    level = level.upper()
    if level not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {list(_LEVELS.keys())}")

    handler = logging.StreamHandler(sys.stdout)
    if log_type == "stdout":
        handler.setFormatter(JsonFormatter())
    elif log_type == "text":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        raise ValueError(f"Unknown log type: {log_type}. Must be one of: stdout, text")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_mongo_stats_exporter", False):
            root.removeHandler(existing)
    handler._mongo_stats_exporter = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(_LEVELS[level])
    return handler
