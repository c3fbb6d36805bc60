# booking_core/services/business/business_service.py
"""Service for managing business operations"""
from booking_core.config.settings import get_settings
from booking_core.models.business import Business
from booking_core.models.reservation_settings import ReservationSettings
from booking_core.models.user import Owner
from booking_core.core.errors import InvalidInputError, NotFoundError
from booking_core.services.settings.reservation_settings_service import (
    ReservationSettingsService,
    default_settings_values,
)
from booking_core.services.store.entity_store import EntityStore, coerce_id
from typing import Any, Optional, List
from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

logger = logging.getLogger(__name__)

business_store = EntityStore(Business)
owner_store = EntityStore(Owner)

MUTABLE_FIELDS = frozenset({"name", "place_id", "address", "latitude", "longitude", "timezone"})


def _check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInputError(f"Unknown timezone: {name}")
    return name


class BusinessService:
    """Handles business-related operations"""

    @staticmethod
    def create_business(
            db: Session,
            owner_id: Any,
            name: str,
            place_id: Optional[str] = None,
            address: Optional[str] = None,
            latitude: Optional[float] = None,
            longitude: Optional[float] = None,
            timezone: Optional[str] = None,
            **settings_overrides: Any
    ) -> Business:
        """
        Onboard a business together with its ReservationSettings row.
        Both rows are written in the same transaction.
        """
        owner = owner_store.get_by_id(db, owner_id)
        overrides = {k: v for k, v in settings_overrides.items() if v is not None}
        ReservationSettingsService.validate_changes(overrides)

        business = Business(
            owner_id=owner.id,
            name=name,
            place_id=place_id,
            address=address,
            latitude=latitude,
            longitude=longitude,
            timezone=_check_timezone(timezone or get_settings().DEFAULT_TIMEZONE),
            is_active=True,
        )
        db.add(business)
        db.flush()

        values = default_settings_values()
        values.update(overrides)
        db.add(ReservationSettings(business_id=business.id, **values))

        business_store.save(db, business, {"name": name})
        logger.info(f"Onboarded business {business.id} ({name}) for owner {owner.id}")
        return business

    @staticmethod
    def get_business(db: Session, business_id: Any) -> Business:
        return business_store.get_by_id(db, business_id)

    @staticmethod
    def get_active_business(db: Session, business_id: Any) -> Business:
        business = business_store.find_by_id(db, business_id)
        if business is None or not business.is_active:
            raise NotFoundError("Business", business_id)
        return business

    @staticmethod
    def update_business(db: Session, business_id: Any, **changes: Any) -> Business:
        """Change name and/or location fields"""
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Business fields cannot be changed: {sorted(unknown)}")
        values = {k: v for k, v in changes.items() if v is not None}
        if "timezone" in values:
            _check_timezone(values["timezone"])
        return business_store.update(db, business_id, **values)

    @staticmethod
    def deactivate_business(db: Session, business_id: Any) -> Business:
        """Soft delete; reservations and rules stay for the audit trail"""
        logger.info(f"Deactivating business {business_id}")
        return business_store.update(db, business_id, is_active=False)

    @staticmethod
    def list_businesses_for_owner(db: Session, owner_id: Any, include_inactive: bool = False) -> List[Business]:
        owner_store.get_by_id(db, owner_id)
        query = db.query(Business).filter(Business.owner_id == coerce_id(owner_id))
        if not include_inactive:
            query = query.filter(Business.is_active.is_(True))
        return query.order_by(Business.name.asc()).all()

    @staticmethod
    def get_business_by_place_id(db: Session, place_id: str) -> Optional[Business]:
        """Get an active business by its external place identifier"""
        return db.query(Business).filter(
            Business.place_id == place_id,
            Business.is_active.is_(True)
        ).first()
