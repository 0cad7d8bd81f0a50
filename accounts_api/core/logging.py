"""
Structured logging configuration using python-json-logger.
Provides consistent, machine-readable logs for production environments.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from accounts_api.core.config import Settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with the service identity."""

    def __init__(self, *args: Any, service: str, version: str, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service = service
        self.version = version

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to each log record."""
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = self.service
        log_record["version"] = self.version
        log_record["level"] = record.levelname


def setup_logging(settings: Settings) -> None:
    """
    Configure application-wide logging.
    Uses JSON format in production, simpler format in development.

    Args:
        settings: Application settings
    """
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    handler = logging.StreamHandler(sys.stdout)

    if settings.DEBUG or not settings.is_production:
        formatter: logging.Formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            timestamp=True,
            service=settings.PROJECT_NAME,
            version=settings.VERSION,
        )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # Replace handlers so repeated app construction does not duplicate output
    for existing in list(root_logger.handlers):
        if getattr(existing, "_accounts_api", False):
            root_logger.removeHandler(existing)
    handler._accounts_api = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
