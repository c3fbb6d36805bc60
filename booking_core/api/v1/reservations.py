# ============================================================================
# booking_core/api/v1/reservations.py
# Booking commands and reservation listing - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Body, Depends, Path, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from booking_core.config.database import get_db
from booking_core.models.reservation import ReservationStatus
from booking_core.schemas.reservation import (
    CancelReservationRequest,
    ReservationCreateRequest,
    ReservationResponse,
)
from booking_core.services.availability.rules import TimeWindow
from booking_core.services.reservation.reservation_query_service import (
    ReservationFilter,
    ReservationQueryService,
)
from booking_core.services.reservation.reservation_service import ReservationService

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def book_reservation(request: ReservationCreateRequest, db: Session = Depends(get_db)):
    """
    Book a slot.
    409 when another active reservation already holds it, 422 when the slot
    is not open or breaks the business's booking policy.
    """
    time_slot = (
        TimeWindow(request.start_time, request.end_time)
        if request.end_time is not None
        else request.start_time
    )
    return ReservationService.book_reservation(
        db,
        user_id=request.user_id,
        business_id=request.business_id,
        reservation_date=request.reservation_date,
        time_slot=time_slot,
        notes=request.notes,
    )


@router.get("", response_model=List[ReservationResponse])
def list_reservations(
        user_id: Optional[UUID] = Query(None),
        business_id: Optional[UUID] = Query(None),
        reservation_date: Optional[date] = Query(None, description="Exact date"),
        date_from: Optional[date] = Query(None, description="On or after this date"),
        date_to: Optional[date] = Query(None, description="On or before this date"),
        reservation_status: Optional[ReservationStatus] = Query(None, alias="status"),
        is_confirmed: Optional[bool] = Query(None),
        is_cancelled: Optional[bool] = Query(None),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(100, ge=1, le=500, description="Number of records to return"),
        db: Session = Depends(get_db)
):
    return ReservationQueryService.list_reservations(
        db,
        ReservationFilter(
            user_id=user_id,
            business_id=business_id,
            reservation_date=reservation_date,
            date_from=date_from,
            date_to=date_to,
            status=reservation_status,
            is_confirmed=is_confirmed,
            is_cancelled=is_cancelled,
            skip=skip,
            limit=limit,
        ),
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(reservation_id: UUID = Path(..., description="The reservation ID"), db: Session = Depends(get_db)):
    return ReservationQueryService.get_reservation(db, reservation_id)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(
        reservation_id: UUID = Path(...),
        request: Optional[CancelReservationRequest] = Body(None),
        db: Session = Depends(get_db)
):
    """Cancel and free the slot. Cancelling twice is a no-op."""
    reason = request.reason if request else None
    return ReservationService.cancel_reservation(db, reservation_id, reason=reason)


@router.post("/{reservation_id}/confirm", response_model=ReservationResponse)
def confirm_reservation(reservation_id: UUID = Path(...), db: Session = Depends(get_db)):
    return ReservationService.confirm_reservation(db, reservation_id)


@router.post("/{reservation_id}/complete", response_model=ReservationResponse)
def complete_reservation(reservation_id: UUID = Path(...), db: Session = Depends(get_db)):
    return ReservationService.complete_reservation(db, reservation_id)
