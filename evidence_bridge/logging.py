# evidence_bridge/logging.py
"""
Structured logging for the webhook evidence bridge.

Every record is an event name plus keyword fields. With JSON output on
(the default, LOG_JSON=true) each line on stdout is one object:

    {"timestamp": ..., "level": "INFO", "logger": "evidence_bridge.sealing.client",
     "message": "bundle_sealed", "bundle_id": ..., "root_hash": ...}

Usage:
    from evidence_bridge.logging import get_logger
    logger = get_logger(__name__)
    logger.info("bundle_sealed", bundle_id=bundle_id, version="0.2.1")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Libraries whose INFO chatter would drown out bundle events
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn")


class StructuredLogFormatter(logging.Formatter):
    """Renders a record and its structured fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "structured_data", {}))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.levelno >= logging.ERROR:
            entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        # Fields such as enums or paths fall back to str()
        return json.dumps(entry, default=str)


class StructuredLogger:
    """
    Thin wrapper that passes keyword fields to the formatter.

    Example:
        logger.warning("sanitization_degraded", engine="remote", error=str(e))
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, event: str, exc_info: bool = False, **fields):
        self._logger.log(level, event, exc_info=exc_info, extra={"structured_data": fields})

    def debug(self, event: str, **fields):
        self._log(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields):
        self._log(logging.INFO, event, **fields)

    def warning(self, event: str, **fields):
        self._log(logging.WARNING, event, **fields)

    def error(self, event: str, exc_info: bool = False, **fields):
        self._log(logging.ERROR, event, exc_info=exc_info, **fields)


_configured = False


def configure_logging(level: str = "INFO", json_output: bool = True):
    """
    Install a single stdout handler on the root logger.

    Only the first call has an effect.

    Args:
        level: Root log level name
        json_output: JSON lines (True) or a plain text layout (False)
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Structured logger for a module, configuring logging from settings on first use."""
    if not _configured:
        from .settings import settings
        configure_logging(level=settings.log_level, json_output=settings.log_json)
    return StructuredLogger(name)


def get_api_logger() -> StructuredLogger:
    return get_logger("evidence_bridge.api")
