# booking_core/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

from booking_core.models.user import OwnerType


class UserCreateRequest(BaseModel):
    """Schema for registering a user"""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    surname: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class ContactUpdateRequest(BaseModel):
    """
    Contact fields only - id and email never change.
    Only send what you want to update.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    surname: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    surname: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OwnerCreateRequest(UserCreateRequest):
    owner_type: OwnerType = OwnerType.INDIVIDUAL


class OwnerUpdateRequest(ContactUpdateRequest):
    owner_type: Optional[OwnerType] = None


class OwnerResponse(UserResponse):
    owner_type: OwnerType
