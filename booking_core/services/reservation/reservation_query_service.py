# ============================================================================
# booking_core/services/reservation/reservation_query_service.py
# Listing and lookup - every filter maps onto a declared index
# ============================================================================
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from booking_core.core.errors import NotFoundError
from booking_core.models.reservation import Reservation, ReservationStatus
from booking_core.services.store.entity_store import EntityStore, coerce_id

reservation_store = EntityStore(Reservation)

MAX_PAGE_SIZE = 500


@dataclass
class ReservationFilter:
    user_id: Optional[Any] = None
    business_id: Optional[Any] = None
    reservation_date: Optional[date] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: Optional[ReservationStatus] = None
    is_confirmed: Optional[bool] = None
    is_cancelled: Optional[bool] = None
    skip: int = 0
    limit: int = 100


class ReservationQueryService:
    """Service layer for reservation reads."""

    @staticmethod
    def get_reservation(db: Session, reservation_id: Any) -> Reservation:
        return reservation_store.get_by_id(db, reservation_id)

    @staticmethod
    def list_reservations(db: Session, filters: Optional[ReservationFilter] = None) -> List[Reservation]:
        """Reservations matching every given filter, ordered by date and slot."""
        filters = filters or ReservationFilter()
        query = db.query(Reservation)

        if filters.user_id is not None:
            query = query.filter(Reservation.user_id == ReservationQueryService._id(filters.user_id, "User"))
        if filters.business_id is not None:
            query = query.filter(
                Reservation.business_id == ReservationQueryService._id(filters.business_id, "Business")
            )
        if filters.reservation_date is not None:
            query = query.filter(Reservation.reservation_date == filters.reservation_date)
        if filters.date_from is not None:
            query = query.filter(Reservation.reservation_date >= filters.date_from)
        if filters.date_to is not None:
            query = query.filter(Reservation.reservation_date <= filters.date_to)
        if filters.status is not None:
            query = query.filter(Reservation.status == ReservationStatus(filters.status))
        if filters.is_confirmed is not None:
            query = query.filter(Reservation.is_confirmed.is_(filters.is_confirmed))
        if filters.is_cancelled is not None:
            query = query.filter(Reservation.is_cancelled.is_(filters.is_cancelled))

        query = query.order_by(
            Reservation.reservation_date.asc(),
            Reservation.start_time.asc(),
            Reservation.created_at.asc(),
        )
        limit = max(1, min(filters.limit, MAX_PAGE_SIZE))
        return query.offset(max(filters.skip, 0)).limit(limit).all()

    @staticmethod
    def _id(value: Any, entity: str):
        key = coerce_id(value)
        if key is None:
            raise NotFoundError(entity, value)
        return key
