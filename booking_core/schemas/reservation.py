# booking_core/schemas/reservation.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date, datetime, time
from uuid import UUID

from booking_core.models.reservation import ReservationStatus


class ReservationCreateRequest(BaseModel):
    """Book one slot; end_time defaults to the end of the slot starting at start_time"""
    user_id: UUID
    business_id: UUID
    reservation_date: date
    start_time: time
    end_time: Optional[time] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode='after')
    def check_times(self):
        if self.end_time is not None and self.start_time >= self.end_time:
            raise ValueError('start_time must be before end_time')
        return self


class CancelReservationRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReservationResponse(BaseModel):
    id: UUID
    user_id: UUID
    business_id: UUID
    reservation_date: date
    start_time: time
    end_time: time
    status: ReservationStatus
    is_confirmed: bool
    is_cancelled: bool
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True
