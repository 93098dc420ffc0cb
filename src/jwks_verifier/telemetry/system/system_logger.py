"""System logger for operational events.

Events are logged as dicts:

    get_system_logger().warning(
        {
            "event": "signature_validation_failed",
            "message": "...",
            "error_type": "KeyNotFoundError",
        }
    )

JsonEventFormatter renders each record as one JSON line, adding an ISO 8601
timestamp and the level. Plain string messages are wrapped as {"message": ...}.

The logger has no output until configure_system_logger() is called, so
library use stays silent unless the application opts in.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

__all__ = [
    "SYSTEM_LOGGER_NAME",
    "JsonEventFormatter",
    "configure_system_logger",
    "get_system_logger",
]

SYSTEM_LOGGER_NAME = "jwks-verifier.system"


class JsonEventFormatter(logging.Formatter):
    """Format dict log messages as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
        }
        if isinstance(record.msg, dict):
            data.update(record.msg)
        else:
            data["message"] = record.getMessage()
        return json.dumps(data, default=str)


def get_system_logger() -> logging.Logger:
    """Get the shared system logger."""
    logger = logging.getLogger(SYSTEM_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def configure_system_logger(
    log_level: str = "INFO",
    log_path: Path | None = None,
) -> logging.Logger:
    """Attach a JSON handler to the system logger.

    Args:
        log_level: Minimum level to emit ("DEBUG", "INFO", "WARNING").
        log_path: JSONL file to append to. Defaults to stderr.

    Returns:
        The configured system logger.
    """
    logger = get_system_logger()
    for existing in list(logger.handlers):
        if not isinstance(existing, logging.NullHandler):
            logger.removeHandler(existing)
            existing.close()

    handler: logging.Handler
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonEventFormatter())

    logger.addHandler(handler)
    logger.setLevel(log_level)
    return logger
