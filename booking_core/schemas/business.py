"""
Pydantic schemas for Business model validation and serialization
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_core.schemas.settings import ReservationSettingsUpdateRequest


def _check_timezone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        ZoneInfo(v)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f'Unknown timezone: {v}')
    return v


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class LocationSchema(BaseModel):
    """Where the business is; place_id is the maps provider's identifier"""
    place_id: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class BusinessCreateRequest(BaseModel):
    """Onboard a business; settings default from configuration when omitted"""
    owner_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    location: LocationSchema = Field(default_factory=LocationSchema)
    timezone: Optional[str] = None
    settings: Optional[ReservationSettingsUpdateRequest] = None

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        return _check_timezone(v)


class BusinessUpdateRequest(BaseModel):
    """
    Schema for updating business information.
    All fields are optional - only send what you want to update.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[LocationSchema] = None
    timezone: Optional[str] = None

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        return _check_timezone(v)

    def to_changes(self) -> dict:
        """Flatten into the column names the service accepts"""
        changes = self.model_dump(exclude_unset=True, exclude={"location"})
        if self.location is not None:
            changes.update(self.location.model_dump(exclude_unset=True))
        return changes


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class BusinessResponse(BaseModel):
    """Schema for business data in responses (built from Business.to_dict)"""
    id: UUID
    name: str
    owner_id: UUID
    location: LocationSchema
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool
