# app/utils/logger.py
"""
Centralised logging configuration for the parking backend.
Logs to console, to a rotating application log, and keeps a separate
rotating audit log for every money movement (charges and refunds).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# Loggers whose records also go to payments.log
PAYMENT_LOGGERS = ("app.services.payment_client", "app.services.session_service")

_configured = False


class _MoneyMovementFilter(logging.Filter):
    """Pass only records tagged [CHARGE] or [REFUND] from the payment loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(PAYMENT_LOGGERS):
            return False
        message = record.getMessage()
        return "[CHARGE]" in message or "[REFUND]" in message


def _rotating_handler(filename: str, fmt: logging.Formatter) -> RotatingFileHandler:
    # Keeps last 10 × 5MB files
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    audit_handler = _rotating_handler("payments.log", fmt)
    audit_handler.addFilter(_MoneyMovementFilter())

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_rotating_handler("parking.log", fmt))
    root.addHandler(audit_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
