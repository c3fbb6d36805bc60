# ============================================================================
# booking_core/services/reservation/reservation_service.py
# ============================================================================
"""
Booking manager: validates a reservation request and commits it.

Conflicts on a slot are detected by the insert itself. The partial unique
index on (business_id, reservation_date, start_time) over non-cancelled rows
decides which of two concurrent requests wins, so there is no "is it free?"
read for the slot key. A lost race surfaces as SlotAlreadyBookedError and is
never retried here; the caller picks another slot.

Live reservations that start elsewhere but overlap the request (left over
from an earlier slot grid) are rejected with the same error before the insert.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo
import logging

from sqlalchemy.orm import Session

from booking_core.core.errors import (
    DuplicateKeyError,
    InvalidStatusTransitionError,
    OutsideAvailabilityError,
    PolicyViolationError,
    SlotAlreadyBookedError,
)
from booking_core.models.business import Business
from booking_core.models.reservation import Reservation, ReservationStatus
from booking_core.models.reservation_settings import ReservationSettings
from booking_core.models.user import User
from booking_core.services.availability.availability_service import AvailabilityService
from booking_core.services.availability.rules import TimeWindow
from booking_core.services.business.business_service import BusinessService
from booking_core.services.settings.reservation_settings_service import ReservationSettingsService
from booking_core.services.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

reservation_store = EntityStore(Reservation)
user_store = EntityStore(User)


def business_now(business: Business, now: Optional[datetime] = None) -> datetime:
    """Naive wall-clock time in the business's timezone."""
    tz = ZoneInfo(business.timezone or "UTC")
    if now is None:
        return datetime.now(tz).replace(tzinfo=None)
    if now.tzinfo is not None:
        return now.astimezone(tz).replace(tzinfo=None)
    return now


class ReservationService:
    """Handles reservation commands"""

    @staticmethod
    def book_reservation(
            db: Session,
            user_id: Any,
            business_id: Any,
            reservation_date: date,
            time_slot: Union[TimeWindow, time],
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Reservation:
        """
        Book one slot.

        ``time_slot`` is either the exact window or just its start time, in
        which case the slot starting there is booked.
        Raises NotFoundError, OutsideAvailabilityError, PolicyViolationError
        or SlotAlreadyBookedError. The new reservation starts PENDING.
        """
        user = user_store.get_by_id(db, user_id)
        business = BusinessService.get_active_business(db, business_id)

        if isinstance(time_slot, TimeWindow) and time_slot.start >= time_slot.end:
            raise OutsideAvailabilityError(f"Time slot {time_slot} is empty or inverted")

        slots = AvailabilityService.resolve_availability(db, business.id, reservation_date)
        if isinstance(time_slot, time):
            time_slot = next((slot for slot in slots if slot.start == time_slot), TimeWindow(time_slot, time_slot))

        if AvailabilityService.find_slot(slots, time_slot) is None:
            logger.warning(
                f"Rejected booking for business {business.id}: {reservation_date} {time_slot} is not an open slot"
            )
            raise OutsideAvailabilityError(
                f"{reservation_date} {time_slot} is not an open slot for business {business.id}"
            )

        settings = ReservationSettingsService.get_or_default(db, business.id)
        ReservationService.check_booking_policy(
            settings, reservation_date, time_slot, business_now(business, now)
        )

        # Same-start collisions are left to the unique index below
        for held in AvailabilityService.live_reservations(db, business.id, reservation_date):
            if held.start_time != time_slot.start and time_slot.overlaps(TimeWindow(held.start_time, held.end_time)):
                logger.warning(
                    f"Rejected booking for business {business.id}: {reservation_date} {time_slot} "
                    f"overlaps reservation {held.id}"
                )
                raise SlotAlreadyBookedError(business.id, reservation_date, time_slot.start)

        try:
            reservation = reservation_store.create(
                db,
                user_id=user.id,
                business_id=business.id,
                reservation_date=reservation_date,
                start_time=time_slot.start,
                end_time=time_slot.end,
                status=ReservationStatus.PENDING,
                is_confirmed=False,
                is_cancelled=False,
                notes=notes,
            )
        except DuplicateKeyError as e:
            logger.warning(f"Slot {reservation_date} {time_slot} already booked for business {business.id}")
            raise SlotAlreadyBookedError(business.id, reservation_date, time_slot.start) from e

        logger.info(
            f"Reservation {reservation.id} created for user {user.id} at business {business.id} "
            f"on {reservation_date} {time_slot}"
        )

        if settings.auto_confirm:
            reservation = ReservationService._transition(db, reservation, ReservationStatus.CONFIRMED)

        return reservation

    @staticmethod
    def cancel_reservation(
            db: Session,
            reservation_id: Any,
            reason: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Reservation:
        """
        Cancel a PENDING or CONFIRMED reservation and free its slot.
        Cancelling an already cancelled reservation returns it unchanged.
        """
        reservation = reservation_store.get_by_id(db, reservation_id)
        if reservation.status == ReservationStatus.CANCELLED:
            return reservation

        if not reservation.can_transition_to(ReservationStatus.CANCELLED):
            raise InvalidStatusTransitionError(reservation.id, reservation.status, ReservationStatus.CANCELLED)

        settings = ReservationSettingsService.get_or_default(db, reservation.business_id)
        window_hours = settings.cancellation_window_hours or 0
        if window_hours > 0:
            business = BusinessService.get_business(db, reservation.business_id)
            starts_at = datetime.combine(reservation.reservation_date, reservation.start_time)
            if starts_at - business_now(business, now) < timedelta(hours=window_hours):
                raise PolicyViolationError(
                    f"Reservations can only be cancelled at least {window_hours}h before they start"
                )

        reservation.cancellation_reason = reason
        reservation = ReservationService._transition(db, reservation, ReservationStatus.CANCELLED)
        logger.info(f"Reservation {reservation.id} cancelled")
        return reservation

    @staticmethod
    def confirm_reservation(db: Session, reservation_id: Any) -> Reservation:
        """PENDING -> CONFIRMED; no-op when already confirmed"""
        reservation = reservation_store.get_by_id(db, reservation_id)
        if reservation.status == ReservationStatus.CONFIRMED:
            return reservation
        return ReservationService._transition(db, reservation, ReservationStatus.CONFIRMED)

    @staticmethod
    def complete_reservation(db: Session, reservation_id: Any) -> Reservation:
        """CONFIRMED -> COMPLETED; no-op when already completed"""
        reservation = reservation_store.get_by_id(db, reservation_id)
        if reservation.status == ReservationStatus.COMPLETED:
            return reservation
        return ReservationService._transition(db, reservation, ReservationStatus.COMPLETED)

    @staticmethod
    def check_booking_policy(
            settings: ReservationSettings,
            reservation_date: date,
            time_slot: TimeWindow,
            now: datetime
    ) -> None:
        """Raise PolicyViolationError when the request breaks the business's settings"""
        if not settings.accept_reservations:
            raise PolicyViolationError("This business is not accepting reservations")

        starts_at = datetime.combine(reservation_date, time_slot.start)
        if starts_at <= now:
            raise PolicyViolationError(f"Cannot book a slot in the past ({starts_at.isoformat()})")

        lead_hours = settings.min_advance_booking_hours or 0
        if starts_at < now + timedelta(hours=lead_hours):
            raise PolicyViolationError(f"Reservations must be made at least {lead_hours}h in advance")

        max_days = settings.max_advance_booking_days
        if max_days is not None and reservation_date > now.date() + timedelta(days=max_days):
            raise PolicyViolationError(f"Reservations can be made at most {max_days} days in advance")

    @staticmethod
    def _transition(db: Session, reservation: Reservation, target: ReservationStatus) -> Reservation:
        if not reservation.can_transition_to(target):
            raise InvalidStatusTransitionError(reservation.id, reservation.status, target)

        previous = reservation.status
        reservation.apply_status(target)
        reservation = reservation_store.save(db, reservation, {"id": reservation.id, "status": target})
        logger.debug(f"Reservation {reservation.id}: {previous} -> {target}")
        return reservation
