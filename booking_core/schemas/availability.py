# booking_core/schemas/availability.py
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional
from datetime import date, datetime, time
from uuid import UUID

from booking_core.models.availability import AvailabilityType


class TimeWindowSchema(BaseModel):
    """Half-open [start, end) interval within one day"""
    start: time
    end: time

    @model_validator(mode='after')
    def check_order(self):
        if self.start >= self.end:
            raise ValueError('start must be before end')
        return self

    @classmethod
    def from_window(cls, window) -> "TimeWindowSchema":
        return cls(start=window.start, end=window.end)


class AvailabilityRuleRequest(BaseModel):
    """
    One availability rule. Which date fields are required depends on
    availability_type; the service rejects malformed shapes.
    """
    availability_type: AvailabilityType
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0=Monday, 6=Sunday")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    specific_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_closed: bool = False
    blocked_windows: List[TimeWindowSchema] = Field(default_factory=list)
    block_reason: Optional[str] = Field(None, max_length=255)
    priority: int = 0

    def to_fields(self) -> dict:
        fields = self.model_dump(exclude={"blocked_windows"})
        fields["blocked_windows"] = [{"start": w.start, "end": w.end} for w in self.blocked_windows]
        return fields


class AvailabilityRuleResponse(BaseModel):
    id: UUID
    business_id: UUID
    availability_type: AvailabilityType
    day_of_week: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    specific_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_closed: bool
    blocked_windows: List[Dict[str, str]] = Field(default_factory=list)
    block_reason: Optional[str] = None
    priority: int
    is_active: bool
    superseded_by_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    business_id: UUID
    date: date
    slots: List[TimeWindowSchema]


class AvailabilityRangeResponse(BaseModel):
    business_id: UUID
    start_date: date
    end_date: date
    days: List[AvailabilityResponse]


class SlotBoardEntry(BaseModel):
    start: time
    end: time
    status: str
    reservation_id: Optional[UUID] = None


class SlotBoardResponse(BaseModel):
    """Every slot of the day with AVAILABLE/BOOKED status"""
    business_id: UUID
    date: date
    available_count: int
    booked_count: int
    slots: List[SlotBoardEntry]
