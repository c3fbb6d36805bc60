# booking_core/services/settings/reservation_settings_service.py
"""Service for a business's booking policy"""
import logging
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from booking_core.config.settings import get_settings
from booking_core.core.errors import InvalidInputError, NotFoundError, PolicyViolationError
from booking_core.models.business import Business
from booking_core.models.reservation import Reservation
from booking_core.models.reservation_settings import ReservationSettings
from booking_core.services.store.entity_store import EntityStore, coerce_id

logger = logging.getLogger(__name__)

settings_store = EntityStore(ReservationSettings)
business_store = EntityStore(Business)

EDITABLE_FIELDS = frozenset({
    "slot_duration_minutes",
    "buffer_minutes",
    "min_advance_booking_hours",
    "max_advance_booking_days",
    "cancellation_window_hours",
    "accept_reservations",
    "auto_confirm",
})

# Changing these moves slot boundaries
GRID_FIELDS = frozenset({"slot_duration_minutes", "buffer_minutes"})


def default_settings_values() -> dict:
    """Defaults for a freshly onboarded business"""
    app_settings = get_settings()
    return {
        "slot_duration_minutes": app_settings.DEFAULT_SLOT_DURATION_MINUTES,
        "buffer_minutes": 0,
        "min_advance_booking_hours": app_settings.DEFAULT_MIN_ADVANCE_BOOKING_HOURS,
        "max_advance_booking_days": app_settings.DEFAULT_MAX_ADVANCE_BOOKING_DAYS,
        "cancellation_window_hours": 0,
        "accept_reservations": True,
        "auto_confirm": False,
    }


class ReservationSettingsService:
    """Handles ReservationSettings operations"""

    @staticmethod
    def find_by_business(db: Session, business_id: Any) -> Optional[ReservationSettings]:
        key = coerce_id(business_id)
        if key is None:
            return None
        return db.query(ReservationSettings).filter(ReservationSettings.business_id == key).first()

    @staticmethod
    def get_settings(db: Session, business_id: Any) -> ReservationSettings:
        """Stored settings for a business; NotFoundError if none were saved"""
        found = ReservationSettingsService.find_by_business(db, business_id)
        if found is None:
            raise NotFoundError("ReservationSettings", business_id)
        return found

    @staticmethod
    def get_or_default(db: Session, business_id: Any) -> ReservationSettings:
        """
        Stored settings, or an unsaved instance holding the defaults.
        Read paths use this so resolving availability never writes.
        """
        found = ReservationSettingsService.find_by_business(db, business_id)
        if found is not None:
            return found
        return ReservationSettings(business_id=coerce_id(business_id), **default_settings_values())

    @staticmethod
    def create_or_update(db: Session, business_id: Any, **changes: Any) -> ReservationSettings:
        """
        Create the settings row for a business or patch the existing one.
        The slot grid (slot length, buffer) is frozen while upcoming
        reservations exist; PolicyViolationError otherwise.
        """
        business = business_store.get_by_id(db, business_id)
        changes = {name: value for name, value in changes.items() if value is not None}
        ReservationSettingsService.validate_changes(changes)

        existing = ReservationSettingsService.find_by_business(db, business_id)
        current = default_settings_values()
        if existing is not None:
            current = {name: getattr(existing, name) for name in EDITABLE_FIELDS}

        regridded = sorted(
            name for name in GRID_FIELDS
            if name in changes and changes[name] != current[name]
        )
        if regridded:
            upcoming = ReservationSettingsService.count_upcoming_reservations(db, business)
            if upcoming:
                logger.warning(
                    f"Refused {regridded} change for business {business.id}: {upcoming} upcoming reservations"
                )
                raise PolicyViolationError(
                    f"Cannot change {', '.join(regridded)} while {upcoming} upcoming reservations exist"
                )

        if existing is None:
            values = current
            values.update(changes)
            logger.info(f"Creating reservation settings for business {business_id}")
            return settings_store.create(db, business_id=business.id, **values)

        logger.info(f"Updating reservation settings for business {business_id}: {sorted(changes)}")
        return settings_store.update(db, existing.id, **changes)

    @staticmethod
    def count_upcoming_reservations(db: Session, business: Business) -> int:
        """Non-cancelled reservations from today on, today taken in the business's timezone"""
        today = datetime.now(ZoneInfo(business.timezone or "UTC")).date()
        return db.query(Reservation).filter(
            Reservation.business_id == business.id,
            Reservation.is_cancelled.is_(False),
            Reservation.reservation_date >= today,
        ).count()

    @staticmethod
    def delete_settings(db: Session, business_id: Any) -> None:
        existing = ReservationSettingsService.get_settings(db, business_id)
        settings_store.delete(db, existing.id)

    @staticmethod
    def validate_changes(changes: dict) -> None:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Unknown reservation settings fields: {sorted(unknown)}")

        if changes.get("slot_duration_minutes") is not None and changes["slot_duration_minutes"] <= 0:
            raise InvalidInputError("slot_duration_minutes must be positive")

        for name in ("buffer_minutes", "min_advance_booking_hours",
                     "max_advance_booking_days", "cancellation_window_hours"):
            if changes.get(name) is not None and changes[name] < 0:
                raise InvalidInputError(f"{name} cannot be negative")
