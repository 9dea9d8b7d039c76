"""JSON structured logging for the flag expiry setter.

Provides structured logging with run IDs, severity levels, and contextual metadata.
Uses python-json-logger for JSON formatting; a plain text format is available
for local runs.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from packages.common.config import get_config

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(run_id)s] %(name)s: %(message)s"


class RunIdFilter(logging.Filter):
    """Logging filter that injects the current run ID into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject run ID into the log record.

        Args:
            record: The log record to modify.

        Returns:
            bool: Always True (doesn't filter out records).
        """
        # Import here to avoid circular dependency
        from packages.common.tracing import get_run_id

        record.run_id = get_run_id() or "-"
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields.

    Adds timestamp, level, module, and run_id to all log records.
    """

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the JSON log record.

        Args:
            log_record: The dictionary that will be serialized to JSON.
            record: The original logging.LogRecord.
            message_dict: Dictionary from the log message.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = record.created
        log_record["level"] = record.levelname
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        if hasattr(record, "run_id"):
            log_record["run_id"] = record.run_id


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structured logging for the application.

    Sets up a console handler writing to stdout with the run ID filter attached.

    Args:
        level: Optional log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, uses LOG_LEVEL from config.
        fmt: Optional format override ("json" or "text").
             If not provided, uses LOG_FORMAT from config.
    """
    config = get_config()
    log_level = (level or config.log_level).upper()
    log_format = fmt or config.log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    formatter: logging.Formatter
    if log_format == "text":
        formatter = logging.Formatter(TEXT_FORMAT)
    else:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(module)s %(function)s %(message)s"
        )
    console_handler.setFormatter(formatter)
    console_handler.addFilter(RunIdFilter())

    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO; keep it to warnings
    logging.getLogger("httpx").setLevel(logging.WARNING)


# Export public API
__all__ = ["CustomJsonFormatter", "RunIdFilter", "TEXT_FORMAT", "setup_logging"]
