"""
Structured logging configuration for the campus events backend.

Provides JSON-formatted logging with file rotation for production environments
and human-readable console logging for development.

Loggers:
- api: HTTP requests, responses, exception handlers
- services: Event lifecycle transitions, registrations, analytics
- db: Database operations and startup schema checks
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


LOGGER_NAMESPACE = "campus_events"
LOGGER_NAMES = ["api", "services", "db"]

# Attributes present on every LogRecord; anything else came from extra={...}
_RESERVED_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.

    Each record includes timestamp, level, logger, message, module,
    function and line, plus any fields passed through ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output in development.

    Example: [2026-10-19 10:30:45] INFO - campus_events.services - Registered S1 for evt_...
    """

    def __init__(self):
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def _get_log_level() -> int:
    """Log level from CAMPUS_EVENTS_LOG_LEVEL (default INFO)."""
    level_str = os.environ.get("CAMPUS_EVENTS_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def _get_log_dir() -> Path:
    """Log directory from CAMPUS_EVENTS_LOG_DIR (default ./logs), created if missing."""
    log_dir = Path(os.environ.get("CAMPUS_EVENTS_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _is_production() -> bool:
    """True when CAMPUS_EVENTS_ENV is 'production'."""
    return os.environ.get("CAMPUS_EVENTS_ENV", "development").lower() == "production"


def configure_logging() -> Dict[str, logging.Logger]:
    """
    Configure the named application loggers.

    Behavior:
    - Production (CAMPUS_EVENTS_ENV=production): JSON logs to one rotating
      file per logger (10MB, 5 backups)
    - Development (default): console output

    Returns:
        Dictionary mapping short logger names to Logger instances
    """
    log_level = _get_log_level()
    is_prod = _is_production()
    log_dir = _get_log_dir() if is_prod else None

    loggers = {}
    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{logger_name}")
        logger.setLevel(log_level)
        logger.propagate = False
        logger.handlers.clear()

        if is_prod:
            handler = logging.handlers.RotatingFileHandler(
                log_dir / f"{logger_name}.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8"
            )
            handler.setFormatter(JSONFormatter())
        else:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(ConsoleFormatter())

        handler.setLevel(log_level)
        logger.addHandler(handler)
        loggers[logger_name] = logger

    return loggers


_loggers: Optional[Dict[str, logging.Logger]] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger by short name.

    Args:
        name: One of api, services, db

    Raises:
        ValueError: If logger name is not recognized

    Example:
        >>> logger = get_logger("services")
        >>> logger.info("Event cancelled", extra={"event_guid": "evt_..."})
    """
    global _loggers

    if _loggers is None:
        _loggers = configure_logging()

    if name not in _loggers:
        raise ValueError(
            f"Unknown logger name: {name}. "
            f"Valid names: {', '.join(_loggers.keys())}"
        )

    return _loggers[name]


def init_logging() -> Dict[str, logging.Logger]:
    """Initialize logging configuration (called once at application import)."""
    global _loggers
    _loggers = configure_logging()
    return _loggers
