# rento/utils/logger.py
"""
Logging setup shared by every rento module.

Console plus a rotating file under LOG_DIR. Booking lifecycle events
(rento.services.booking_service) are also copied into a separate audit file
so hosts' disputes can be traced without digging through request noise.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from rento.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR
AUDIT_LOGGER = "rento.services.booking_service"

# Chatty at INFO; one line per webhook call / SQL statement
QUIET_LIBRARIES = ("httpx", "httpcore", "sqlalchemy.engine", "urllib3")

_configured = False


def _rotating(filename: str, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True
    os.makedirs(LOG_DIR, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_rotating("rento.log", fmt))

    logging.getLogger(AUDIT_LOGGER).addHandler(_rotating("bookings.log", fmt))

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; the first call wires up the handlers."""
    _configure_root_logger()
    return logging.getLogger(name)
