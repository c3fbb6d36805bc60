# booking_core/schemas/settings.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class ReservationSettingsUpdateRequest(BaseModel):
    """
    Booking policy for a business.
    All fields are optional - omitted fields keep their current (or default) value.
    """
    slot_duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60, description="Slot granularity")
    buffer_minutes: Optional[int] = Field(None, ge=0, description="Gap between consecutive slots")
    min_advance_booking_hours: Optional[int] = Field(None, ge=0, description="Lead time")
    max_advance_booking_days: Optional[int] = Field(None, ge=0)
    cancellation_window_hours: Optional[int] = Field(None, ge=0)
    accept_reservations: Optional[bool] = None
    auto_confirm: Optional[bool] = None


class ReservationSettingsResponse(BaseModel):
    id: UUID
    business_id: UUID
    slot_duration_minutes: int
    buffer_minutes: int
    min_advance_booking_hours: int
    max_advance_booking_days: int
    cancellation_window_hours: int
    accept_reservations: bool
    auto_confirm: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
