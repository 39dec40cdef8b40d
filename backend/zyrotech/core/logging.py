"""
Logging Configuration Module

This module provides the logging setup for the API:
- Structured JSON logging through python-json-logger
- Request-scoped correlation tracking
- Sensitive data masking (passwords, tokens, OTPs, PINs, KYC identifiers)
- Exception details with full tracebacks
- Environment-aware handlers
"""

import contextlib
import logging
import logging.config
import sys
import time
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, Iterator, Optional, Set

from pythonjsonlogger import jsonlogger

from zyrotech.core.settings import settings

# Context variables for request-scoped data
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# Keys whose values never reach the log output
SENSITIVE_FIELDS: Set[str] = {
    "password", "token", "secret", "authorization", "otp", "pin",
    "pan", "aadhar", "id_token", "idtoken",
}

MASK = "***MASKED***"


class ContextualJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that stamps request context onto every record and masks
    sensitive values.
    """

    def __init__(
        self,
        *args: Any,
        sensitive_fields: Optional[Set[str]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.sensitive_fields = sensitive_fields or SENSITIVE_FIELDS

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["environment"] = settings.app.ENVIRONMENT

        cid = correlation_id.get()
        if cid:
            log_record["correlation_id"] = cid

        uid = user_id.get()
        if uid:
            log_record["user_id"] = str(uid)

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_record["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb)
            }
            log_record.pop("exc_info", None)

        self._mask_sensitive_data(log_record)

    def _is_sensitive(self, key: str) -> bool:
        lowered = key.lower()
        # "pin" is a substring of too many harmless keys
        if lowered == "pin" or lowered.endswith("_pin"):
            return True
        return any(
            field in lowered for field in self.sensitive_fields if field != "pin"
        )

    def _mask_sensitive_data(self, log_record: Dict[str, Any]) -> None:
        """Recursively mask sensitive data in the log record."""
        def mask_dict(d: Dict[str, Any]) -> None:
            for k, v in d.items():
                if isinstance(k, str) and self._is_sensitive(k):
                    d[k] = MASK
                elif isinstance(v, dict):
                    mask_dict(v)
                elif isinstance(v, list):
                    for item in v:
                        if isinstance(item, dict):
                            mask_dict(item)

        mask_dict(log_record)


@contextlib.contextmanager
def log_duration(logger: logging.Logger, operation: str) -> Iterator[None]:
    """Context manager to log operation duration."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{operation} completed",
            extra={"duration_ms": round(duration, 2), "operation": operation}
        )


def setup_logging() -> None:
    """
    Configure logging with the JSON formatter and environment-specific handlers.
    """
    formatter = "json" if settings.logging.JSON_LOGS else "plain"

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": formatter
        }
    }

    # File handler outside development and tests
    if settings.app.ENVIRONMENT not in ("development", "test"):
        log_dir = settings.logging.LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_dir / f"{settings.app.ENVIRONMENT}.log"),
            "maxBytes": settings.logging.LOG_MAX_BYTES,
            "backupCount": settings.logging.LOG_BACKUP_COUNT,
            "formatter": "json"
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": ContextualJsonFormatter,
                "format": "%(timestamp)s %(level)s %(name)s %(message)s",
                "json_ensure_ascii": False
            },
            "plain": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"
            }
        },
        "handlers": handlers,
        "root": {
            "level": settings.logging.LEVEL,
            "handlers": list(handlers.keys())
        },
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
            "aiosmtplib": {"level": "WARNING"}
        }
    })

    get_logger(__name__).info(
        "Logging configured",
        extra={
            "tags": ["startup", "logging"],
            "log_level": settings.logging.LEVEL
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: The name of the logger (typically __name__)

    Returns:
        A standard library logger
    """
    return logging.getLogger(name)
