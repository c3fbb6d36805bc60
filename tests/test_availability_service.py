from datetime import date, time
import uuid

import pytest

from booking_core.core.errors import (
    AmbiguousAvailabilityError,
    InvalidAvailabilityRuleError,
    InvalidInputError,
    NotFoundError,
    PolicyViolationError,
    SlotAlreadyBookedError,
)
from booking_core.models.availability import AvailabilityType
from booking_core.models.reservation import Reservation, ReservationStatus
from booking_core.services.availability.availability_rule_service import AvailabilityRuleService
from booking_core.services.availability.availability_service import (
    SLOT_AVAILABLE,
    SLOT_BOOKED,
    AvailabilityService,
)
from booking_core.services.availability.rules import TimeWindow
from booking_core.services.business.business_service import BusinessService
from booking_core.services.reservation.reservation_service import ReservationService
from booking_core.services.settings.reservation_settings_service import ReservationSettingsService

from conftest import MONDAY, NOW


def closed_day(db, business_id, day):
    return AvailabilityRuleService.create_rule(
        db,
        business_id,
        availability_type=AvailabilityType.SPECIFIC_DATE,
        specific_date=day,
        is_closed=True,
        block_reason="Holiday",
    )


def test_weekly_hours_give_sixteen_half_hour_slots(db, business, monday_hours):
    slots = AvailabilityService.resolve_availability(db, business.id, MONDAY)

    assert len(slots) == 16
    assert slots[0] == TimeWindow(time(9, 0), time(9, 30))
    assert [slot.start for slot in slots] == sorted(slot.start for slot in slots)


def test_closed_holiday_returns_empty(db, business, monday_hours):
    closed_day(db, business.id, MONDAY)

    assert AvailabilityService.resolve_availability(db, business.id, MONDAY) == []
    assert len(AvailabilityService.resolve_availability(db, business.id, date(2030, 1, 14))) == 16


def test_no_rules_is_closed(db, business):
    assert AvailabilityService.resolve_availability(db, business.id, MONDAY) == []


def test_unknown_or_inactive_business_is_not_found(db, business):
    with pytest.raises(NotFoundError):
        AvailabilityService.resolve_availability(db, uuid.uuid4(), MONDAY)

    BusinessService.deactivate_business(db, business.id)
    with pytest.raises(NotFoundError):
        AvailabilityService.resolve_availability(db, business.id, MONDAY)


def test_settings_drive_granularity_and_buffer(db, business, monday_hours):
    ReservationSettingsService.create_or_update(db, business.id, slot_duration_minutes=60, buffer_minutes=30)

    slots = AvailabilityService.resolve_availability(db, business.id, MONDAY)

    # 09:00, 10:30, 12:00, 13:30, 15:00; 16:30 would end after 17:00
    assert [slot.start for slot in slots] == [time(9, 0), time(10, 30), time(12, 0), time(13, 30), time(15, 0)]


def test_missing_settings_fall_back_to_defaults_without_writing(db, business, monday_hours):
    ReservationSettingsService.delete_settings(db, business.id)

    slots = AvailabilityService.resolve_availability(db, business.id, MONDAY)

    assert len(slots) == 16
    assert ReservationSettingsService.find_by_business(db, business.id) is None


def test_blocked_lunch_break(db, business):
    AvailabilityRuleService.create_rule(
        db,
        business.id,
        availability_type=AvailabilityType.RECURRING_WEEKLY,
        day_of_week=0,
        start_time=time(9, 0),
        end_time=time(14, 0),
        blocked_windows=[{"start": "12:00", "end": "13:00"}],
        block_reason="Lunch",
    )

    starts = [slot.start for slot in AvailabilityService.resolve_availability(db, business.id, MONDAY)]

    assert time(12, 0) not in starts
    assert time(12, 30) not in starts
    assert time(13, 0) in starts


def test_overlapping_rules_raise_until_one_is_deactivated(db, business, monday_hours):
    other = AvailabilityRuleService.create_rule(
        db,
        business.id,
        availability_type=AvailabilityType.RECURRING_WEEKLY,
        day_of_week=0,
        start_time=time(12, 0),
        end_time=time(20, 0),
    )

    with pytest.raises(AmbiguousAvailabilityError):
        AvailabilityService.resolve_availability(db, business.id, MONDAY)

    AvailabilityRuleService.deactivate_rule(db, other.id)
    assert len(AvailabilityService.resolve_availability(db, business.id, MONDAY)) == 16


def test_date_range_overrides_weekly(db, business, monday_hours):
    AvailabilityRuleService.create_rule(
        db,
        business.id,
        availability_type=AvailabilityType.DATE_RANGE,
        start_date=date(2030, 1, 1),
        end_date=date(2030, 1, 10),
        start_time=time(10, 0),
        end_time=time(12, 0),
    )

    assert len(AvailabilityService.resolve_availability(db, business.id, MONDAY)) == 4
    assert len(AvailabilityService.resolve_availability(db, business.id, date(2030, 1, 14))) == 16


def test_range_resolution(db, business, monday_hours):
    closed_day(db, business.id, date(2030, 1, 14))

    by_day = AvailabilityService.resolve_availability_range(db, business.id, MONDAY, date(2030, 1, 14))

    assert list(by_day) == [date(2030, 1, d) for d in range(7, 15)]
    assert len(by_day[MONDAY]) == 16
    assert by_day[date(2030, 1, 8)] == []
    assert by_day[date(2030, 1, 14)] == []


def test_range_resolution_rejects_bad_bounds(db, business):
    with pytest.raises(InvalidInputError):
        AvailabilityService.resolve_availability_range(db, business.id, date(2030, 1, 14), MONDAY)
    with pytest.raises(InvalidInputError):
        AvailabilityService.resolve_availability_range(db, business.id, MONDAY, date(2031, 1, 7))


def test_slot_board_marks_booked_slots(db, business, monday_hours, user):
    reservation = ReservationService.book_reservation(
        db, user.id, business.id, MONDAY, TimeWindow(time(10, 0), time(10, 30)), now=NOW
    )

    board = AvailabilityService.get_slot_board(db, business.id, MONDAY)
    booked = [slot for slot in board if slot.status == SLOT_BOOKED]

    assert len(board) == 16
    assert len(booked) == 1
    assert booked[0].window.start == time(10, 0)
    assert booked[0].reservation_id == reservation.id
    assert not booked[0].is_bookable

    ReservationService.cancel_reservation(db, reservation.id, now=NOW)
    board = AvailabilityService.get_slot_board(db, business.id, MONDAY)
    assert all(slot.status == SLOT_AVAILABLE for slot in board)


# ============================================================================
# Rule write path
# ============================================================================

@pytest.mark.parametrize("fields", [
    {"availability_type": AvailabilityType.RECURRING_WEEKLY, "day_of_week": 7,
     "start_time": time(9, 0), "end_time": time(10, 0)},
    {"availability_type": AvailabilityType.DATE_RANGE, "start_date": date(2030, 2, 1),
     "end_date": date(2030, 1, 1), "is_closed": True},
    {"availability_type": AvailabilityType.SPECIFIC_DATE, "is_closed": True},
    {"availability_type": AvailabilityType.RECURRING_WEEKLY, "day_of_week": 0},
    {"availability_type": AvailabilityType.RECURRING_WEEKLY, "day_of_week": 0,
     "start_time": time(17, 0), "end_time": time(9, 0)},
    {"availability_type": AvailabilityType.RECURRING_WEEKLY, "day_of_week": 0,
     "start_time": time(9, 0), "end_time": time(12, 0),
     "blocked_windows": [{"start": "11:00", "end": "13:00"}]},
    {"availability_type": "SOMETIMES"},
])
def test_malformed_rules_are_rejected(db, business, fields):
    with pytest.raises(InvalidAvailabilityRuleError):
        AvailabilityRuleService.create_rule(db, business.id, **fields)


def test_closed_rule_drops_hours(db, business):
    rule = AvailabilityRuleService.create_rule(
        db,
        business.id,
        availability_type=AvailabilityType.SPECIFIC_DATE,
        specific_date=MONDAY,
        is_closed=True,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )

    assert rule.start_time is None
    assert rule.end_time is None
    assert rule.blocked_windows == []


def test_supersede_rule_keeps_audit_trail(db, business, monday_hours):
    replacement = AvailabilityRuleService.supersede_rule(
        db, monday_hours.id, start_time=time(10, 0), end_time=time(12, 0)
    )
    db.refresh(monday_hours)

    assert monday_hours.is_active is False
    assert monday_hours.superseded_by_id == replacement.id
    assert replacement.day_of_week == 0
    assert [r.id for r in AvailabilityRuleService.list_rules(db, business.id)] == [replacement.id]
    assert len(AvailabilityRuleService.list_rules(db, business.id, active_only=False)) == 2
    assert len(AvailabilityService.resolve_availability(db, business.id, MONDAY)) == 4

    with pytest.raises(InvalidAvailabilityRuleError):
        AvailabilityRuleService.supersede_rule(db, monday_hours.id, priority=3)


def test_deactivate_rule_is_idempotent(db, business, monday_hours):
    AvailabilityRuleService.deactivate_rule(db, monday_hours.id)
    again = AvailabilityRuleService.deactivate_rule(db, monday_hours.id)

    assert again.is_active is False
    assert AvailabilityService.resolve_availability(db, business.id, MONDAY) == []


# ============================================================================
# One timeline per business
# ============================================================================

def test_slot_grid_cannot_move_under_upcoming_bookings(db, business, monday_hours, user):
    ReservationService.book_reservation(
        db, user.id, business.id, MONDAY, TimeWindow(time(10, 30), time(11, 0)), now=NOW
    )

    with pytest.raises(PolicyViolationError):
        ReservationSettingsService.create_or_update(db, business.id, slot_duration_minutes=60)
    with pytest.raises(PolicyViolationError):
        ReservationSettingsService.create_or_update(db, business.id, buffer_minutes=5)

    # Re-sending the current values or touching other fields is fine
    same = ReservationSettingsService.create_or_update(
        db, business.id, slot_duration_minutes=30, min_advance_booking_hours=1
    )
    assert same.min_advance_booking_hours == 1
    assert ReservationSettingsService.get_settings(db, business.id).slot_duration_minutes == 30


def test_past_reservations_do_not_freeze_the_grid(db, business, monday_hours, user):
    db.add(Reservation(
        user_id=user.id,
        business_id=business.id,
        reservation_date=date(2020, 1, 6),
        start_time=time(10, 0),
        end_time=time(10, 30),
        status=ReservationStatus.CONFIRMED,
        is_confirmed=True,
        is_cancelled=False,
    ))
    db.commit()

    updated = ReservationSettingsService.create_or_update(db, business.id, slot_duration_minutes=60)

    assert updated.slot_duration_minutes == 60


def _regrid_with_booking(db, business, user, start, end):
    """Book under the 30 minute grid, then switch to 60 minutes behind the service's back."""
    reservation = ReservationService.book_reservation(
        db, user.id, business.id, MONDAY, TimeWindow(start, end), now=NOW
    )
    settings = ReservationSettingsService.get_settings(db, business.id)
    settings.slot_duration_minutes = 60
    db.commit()
    return reservation


def test_slot_board_marks_slots_overlapping_an_off_grid_booking(db, business, monday_hours, user):
    reservation = _regrid_with_booking(db, business, user, time(10, 30), time(11, 0))

    board = AvailabilityService.get_slot_board(db, business.id, MONDAY)
    by_start = {slot.window.start: slot for slot in board}

    assert len(board) == 8
    assert by_start[time(10, 0)].status == SLOT_BOOKED
    assert by_start[time(10, 0)].reservation_id == reservation.id
    assert by_start[time(11, 0)].status == SLOT_AVAILABLE


def test_booking_over_an_off_grid_reservation_conflicts(db, business, monday_hours, user, other_user):
    _regrid_with_booking(db, business, user, time(10, 30), time(11, 0))

    with pytest.raises(SlotAlreadyBookedError):
        ReservationService.book_reservation(
            db, other_user.id, business.id, MONDAY, TimeWindow(time(10, 0), time(11, 0)), now=NOW
        )

    live = AvailabilityService.live_reservations(db, business.id, MONDAY)
    assert [(r.start_time, r.end_time) for r in live] == [(time(10, 30), time(11, 0))]

    neighbour = ReservationService.book_reservation(
        db, other_user.id, business.id, MONDAY, TimeWindow(time(11, 0), time(12, 0)), now=NOW
    )
    assert neighbour.start_time == time(11, 0)
