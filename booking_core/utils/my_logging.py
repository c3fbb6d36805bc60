# booking_core/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from typing import Optional

from booking_core.config.settings import get_settings

APP_LOGGER = "booking_core"

# Rejected bookings and slot conflicts are logged at WARNING here
BOOKING_LOGGERS = [
    "booking_core.services.reservation",
    "booking_core.services.settings",
]

# Per-statement and per-request chatter, only wanted when debugging
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "uvicorn.access",
]


def setup_logging(level: Optional[str] = None):
    """
    Configure application logging.

    ``level`` overrides LOG_LEVEL. Booking loggers never go quieter than
    WARNING so refused bookings stay visible with LOG_LEVEL=ERROR.
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()
    app_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=app_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    logging.getLogger(APP_LOGGER).setLevel(app_level)
    for name in BOOKING_LOGGERS:
        logging.getLogger(name).setLevel(min(app_level, logging.WARNING))

    noisy_level = logging.DEBUG if app_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
