# booking_core/models/__init__.py
from .base import Base
from .user import User, Owner, OwnerType
from .business import Business
from .reservation_settings import ReservationSettings
from .availability import BusinessAvailability, AvailabilityType
from .reservation import Reservation, ReservationStatus

__all__ = [
    "Base",
    "User",
    "Owner",
    "OwnerType",
    "Business",
    "ReservationSettings",
    "BusinessAvailability",
    "AvailabilityType",
    "Reservation",
    "ReservationStatus",
]
