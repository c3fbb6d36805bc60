# ===== booking_core/services/availability/availability_service.py =====
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from booking_core.config.settings import get_settings
from booking_core.core.errors import AmbiguousAvailabilityError, InvalidInputError, NotFoundError
from booking_core.models.availability import AvailabilityType, BusinessAvailability
from booking_core.models.business import Business
from booking_core.models.reservation import Reservation
from booking_core.services.availability.rules import (
    DateRange,
    RecurringWeekly,
    Rule,
    SpecificDate,
    TimeWindow,
    resolve_slots,
)
from booking_core.services.settings.reservation_settings_service import ReservationSettingsService
from booking_core.services.store.entity_store import coerce_id
import logging

logger = logging.getLogger(__name__)

SLOT_AVAILABLE = "AVAILABLE"
SLOT_BOOKED = "BOOKED"


@dataclass(frozen=True)
class SlotInfo:
    """One slot of the day with whether an active reservation holds it"""
    window: TimeWindow
    status: str
    reservation_id: Optional[UUID] = None

    @property
    def is_bookable(self) -> bool:
        return self.status == SLOT_AVAILABLE


def parse_windows(raw: Optional[List[Dict[str, str]]]) -> List[TimeWindow]:
    """blocked_windows JSON -> TimeWindow list"""
    windows = []
    for item in raw or []:
        windows.append(TimeWindow(_as_time(item["start"]), _as_time(item["end"])))
    return windows


def to_rule(row: BusinessAvailability) -> Rule:
    """Map a stored availability row onto its rule variant"""
    window = None
    if not row.is_closed and row.start_time is not None and row.end_time is not None:
        window = TimeWindow(row.start_time, row.end_time)

    common = dict(
        rule_id=str(row.id),
        window=window,
        is_closed=bool(row.is_closed),
        priority=row.priority or 0,
        blocked=tuple(parse_windows(row.blocked_windows)),
    )

    kind = AvailabilityType(row.availability_type)
    if kind == AvailabilityType.SPECIFIC_DATE:
        return SpecificDate(specific_date=row.specific_date, **common)
    if kind == AvailabilityType.DATE_RANGE:
        return DateRange(start_date=row.start_date, end_date=row.end_date, **common)
    return RecurringWeekly(day_of_week=row.day_of_week, **common)


class AvailabilityService:
    """Computes bookable slots from stored rules. Read-only."""

    @staticmethod
    def resolve_availability(db: Session, business_id: Any, day: date) -> List[TimeWindow]:
        """
        Ordered bookable slots for a business on a date.

        Empty when the business is closed (including when no rule applies).
        Raises AmbiguousAvailabilityError when equally specific rules conflict.
        """
        business = AvailabilityService._get_business(db, business_id)
        settings = ReservationSettingsService.get_or_default(db, business.id)
        rows = AvailabilityService._load_rules(db, business.id, day, day)

        try:
            slots = resolve_slots(
                [to_rule(row) for row in rows],
                day,
                settings.slot_duration_minutes,
                settings.buffer_minutes or 0,
            )
        except AmbiguousAvailabilityError as e:
            logger.error(f"Availability misconfigured for business {business.id} on {day}: {e}")
            raise

        logger.debug(f"Resolved {len(slots)} slots for business {business.id} on {day}")
        return slots

    @staticmethod
    def resolve_availability_range(
            db: Session,
            business_id: Any,
            start_date: date,
            end_date: date
    ) -> Dict[date, List[TimeWindow]]:
        """Slots per date for an inclusive date range, loading rules once"""
        if end_date < start_date:
            raise InvalidInputError("end_date must not be before start_date")

        max_days = get_settings().MAX_RESOLVE_RANGE_DAYS
        if (end_date - start_date).days + 1 > max_days:
            raise InvalidInputError(f"Date range is limited to {max_days} days")

        business = AvailabilityService._get_business(db, business_id)
        settings = ReservationSettingsService.get_or_default(db, business.id)
        rules = [to_rule(row) for row in AvailabilityService._load_rules(db, business.id, start_date, end_date)]

        result = {}
        current = start_date
        while current <= end_date:
            try:
                result[current] = resolve_slots(
                    rules, current, settings.slot_duration_minutes, settings.buffer_minutes or 0
                )
            except AmbiguousAvailabilityError as e:
                logger.error(f"Availability misconfigured for business {business.id} on {current}: {e}")
                raise
            current += timedelta(days=1)

        return result

    @staticmethod
    def live_reservations(db: Session, business_id: Any, day: date) -> List[Reservation]:
        """Non-cancelled reservations of a business on one date, by start time"""
        return db.query(Reservation).filter(
            Reservation.business_id == coerce_id(business_id),
            Reservation.reservation_date == day,
            Reservation.is_cancelled.is_(False),
        ).order_by(Reservation.start_time).all()

    @staticmethod
    def get_slot_board(db: Session, business_id: Any, day: date) -> List[SlotInfo]:
        """
        Every slot of the day marked AVAILABLE or BOOKED.
        A slot is BOOKED when any live reservation overlaps it, including one
        made under an earlier slot length.
        """
        slots = AvailabilityService.resolve_availability(db, business_id, day)
        held = AvailabilityService.live_reservations(db, business_id, day)

        board = []
        for slot in slots:
            holder = next(
                (r for r in held if slot.overlaps(TimeWindow(r.start_time, r.end_time))), None
            )
            if holder is None:
                board.append(SlotInfo(window=slot, status=SLOT_AVAILABLE))
            else:
                board.append(SlotInfo(window=slot, status=SLOT_BOOKED, reservation_id=holder.id))
        return board

    @staticmethod
    def find_slot(slots: List[TimeWindow], requested: TimeWindow) -> Optional[TimeWindow]:
        """The slot that starts where ``requested`` starts and fully contains it"""
        for slot in slots:
            if slot.start == requested.start and slot.contains(requested):
                return slot
        return None

    @staticmethod
    def _get_business(db: Session, business_id: Any) -> Business:
        key = coerce_id(business_id)
        business = db.get(Business, key) if key is not None else None
        if business is None or not business.is_active:
            raise NotFoundError("Business", business_id)
        return business

    @staticmethod
    def _load_rules(db: Session, business_id: UUID, start_date: date, end_date: date) -> List[BusinessAvailability]:
        """Active rules that can apply somewhere in [start_date, end_date]"""
        return db.query(BusinessAvailability).filter(
            BusinessAvailability.business_id == business_id,
            BusinessAvailability.is_active.is_(True),
            or_(
                BusinessAvailability.availability_type == AvailabilityType.RECURRING_WEEKLY,
                and_(
                    BusinessAvailability.availability_type == AvailabilityType.DATE_RANGE,
                    BusinessAvailability.start_date <= end_date,
                    BusinessAvailability.end_date >= start_date,
                ),
                and_(
                    BusinessAvailability.availability_type == AvailabilityType.SPECIFIC_DATE,
                    BusinessAvailability.specific_date.between(start_date, end_date),
                ),
            ),
        ).all()


def _as_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))
