"""
Logging configuration.

Single-line structured output:
[TIMESTAMP] [LEVEL] [MODULE:FUNCTION:LINE] MESSAGE
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """Structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        location = f"{record.module}:{record.funcName}:{record.lineno}"
        message = f"[{timestamp}] [{record.levelname:8s}] [{location}] {record.getMessage()}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logger(name: str = "wealth_tax", level: Optional[str] = None) -> logging.Logger:
    """
    Set up the package logger.

    Args:
        name: Logger name. Child loggers (``wealth_tax.services...``) inherit
            the handler installed here.
        level: DEBUG, INFO, WARNING or ERROR. Defaults to ``LOG_LEVEL`` or INFO.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, level, logging.INFO)
    logger.setLevel(log_level)

    # Avoid duplicate handlers on reload
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    return logger
