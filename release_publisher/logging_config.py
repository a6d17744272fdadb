"""Logging configuration for release-publisher."""

import logging
import os
import sys
from typing import Any, Dict, Optional

# Fields callers may attach with ``extra=`` that the structured formatter keeps
STRUCTURED_FIELDS = ("kind", "instance", "username", "mode", "method", "url", "artifact", "status")


def setup_logging(level: Optional[str] = None, structured: Optional[bool] = None) -> logging.Logger:
    """
    Set up logging configuration for the publisher.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to PUBLISHER_LOG_LEVEL or INFO.
        structured: Whether to use structured JSON logging. Defaults to PUBLISHER_LOG_JSON.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("release_publisher")

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    if level is None:
        level = os.getenv("PUBLISHER_LOG_LEVEL", "INFO")
    if structured is None:
        structured = os.getenv("PUBLISHER_LOG_JSON", "").lower() in ("true", "yes", "1", "on")

    logger.setLevel(getattr(logging, level.upper()))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        import json
        from datetime import datetime

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


# Global logger instance
logger = setup_logging()
