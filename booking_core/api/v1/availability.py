# ============================================================================
# booking_core/api/v1/availability.py
# Availability rules (write path) and resolved slots (read path)
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List
from uuid import UUID

from booking_core.config.database import get_db
from booking_core.core.errors import NotFoundError
from booking_core.schemas.availability import (
    AvailabilityRangeResponse,
    AvailabilityResponse,
    AvailabilityRuleRequest,
    AvailabilityRuleResponse,
    SlotBoardEntry,
    SlotBoardResponse,
    TimeWindowSchema,
)
from booking_core.services.availability.availability_rule_service import AvailabilityRuleService
from booking_core.services.availability.availability_service import AvailabilityService, SLOT_BOOKED

router = APIRouter(prefix="/businesses/{business_id}", tags=["availability"])


def _rule_for_business(db: Session, business_id: UUID, rule_id: UUID):
    rule = AvailabilityRuleService.find_rule_for_business(db, business_id, rule_id)
    if rule is None:
        raise NotFoundError("AvailabilityRule", rule_id)
    return rule


# ============================================================================
# RULES
# ============================================================================

@router.get("/availability-rules", response_model=List[AvailabilityRuleResponse])
def list_rules(
        business_id: UUID = Path(...),
        active_only: bool = Query(True, description="Hide deactivated and superseded rules"),
        db: Session = Depends(get_db)
):
    return AvailabilityRuleService.list_rules(db, business_id, active_only=active_only)


@router.post("/availability-rules", response_model=AvailabilityRuleResponse, status_code=201)
def create_rule(request: AvailabilityRuleRequest, business_id: UUID = Path(...), db: Session = Depends(get_db)):
    return AvailabilityRuleService.create_rule(db, business_id, **request.to_fields())


@router.get("/availability-rules/{rule_id}", response_model=AvailabilityRuleResponse)
def get_rule(business_id: UUID = Path(...), rule_id: UUID = Path(...), db: Session = Depends(get_db)):
    return _rule_for_business(db, business_id, rule_id)


@router.put("/availability-rules/{rule_id}", response_model=AvailabilityRuleResponse)
def supersede_rule(
        request: AvailabilityRuleRequest,
        business_id: UUID = Path(...),
        rule_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    """
    Replace a rule. The old row is deactivated and linked to the new one;
    the response is the replacement.
    """
    rule = _rule_for_business(db, business_id, rule_id)
    return AvailabilityRuleService.supersede_rule(db, rule.id, **request.to_fields())


@router.delete("/availability-rules/{rule_id}", response_model=AvailabilityRuleResponse)
def deactivate_rule(business_id: UUID = Path(...), rule_id: UUID = Path(...), db: Session = Depends(get_db)):
    rule = _rule_for_business(db, business_id, rule_id)
    return AvailabilityRuleService.deactivate_rule(db, rule.id)


# ============================================================================
# RESOLVED AVAILABILITY
# ============================================================================

@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
        business_id: UUID = Path(...),
        day: date = Query(..., alias="date", description="Date to resolve (YYYY-MM-DD)"),
        db: Session = Depends(get_db)
):
    """Bookable slots for one date. Empty list when closed."""
    slots = AvailabilityService.resolve_availability(db, business_id, day)
    return AvailabilityResponse(
        business_id=business_id,
        date=day,
        slots=[TimeWindowSchema.from_window(slot) for slot in slots],
    )


@router.get("/availability/range", response_model=AvailabilityRangeResponse)
def get_availability_range(
        business_id: UUID = Path(...),
        start_date: date = Query(...),
        end_date: date = Query(...),
        db: Session = Depends(get_db)
):
    by_day = AvailabilityService.resolve_availability_range(db, business_id, start_date, end_date)
    return AvailabilityRangeResponse(
        business_id=business_id,
        start_date=start_date,
        end_date=end_date,
        days=[
            AvailabilityResponse(
                business_id=business_id,
                date=day,
                slots=[TimeWindowSchema.from_window(slot) for slot in slots],
            )
            for day, slots in by_day.items()
        ],
    )


@router.get("/slots", response_model=SlotBoardResponse)
def get_slot_board(
        business_id: UUID = Path(...),
        day: date = Query(..., alias="date"),
        db: Session = Depends(get_db)
):
    """Every slot of the day with whether it is already booked"""
    board = AvailabilityService.get_slot_board(db, business_id, day)
    booked = sum(1 for slot in board if slot.status == SLOT_BOOKED)
    return SlotBoardResponse(
        business_id=business_id,
        date=day,
        available_count=len(board) - booked,
        booked_count=booked,
        slots=[
            SlotBoardEntry(
                start=slot.window.start,
                end=slot.window.end,
                status=slot.status,
                reservation_id=slot.reservation_id,
            )
            for slot in board
        ],
    )
