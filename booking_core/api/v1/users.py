# ============================================================================
# booking_core/api/v1/users.py
# Users and owners - thin HTTP layer over the entity services
# ============================================================================
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from booking_core.config.database import get_db
from booking_core.schemas.business import BusinessResponse
from booking_core.schemas.user import (
    ContactUpdateRequest,
    OwnerCreateRequest,
    OwnerResponse,
    OwnerUpdateRequest,
    UserCreateRequest,
    UserResponse,
)
from booking_core.services.business.business_service import BusinessService
from booking_core.services.user.user_service import OwnerService, UserService

users_router = APIRouter(prefix="/users", tags=["users"])
owners_router = APIRouter(prefix="/owners", tags=["owners"])


# ============================================================================
# USERS
# ============================================================================

@users_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(request: UserCreateRequest, db: Session = Depends(get_db)):
    """Register a user. 409 if the email is already taken."""
    return UserService.create_user(db, **request.model_dump())


@users_router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: UUID = Path(..., description="The user ID"), db: Session = Depends(get_db)):
    return UserService.get_user(db, user_id)


@users_router.patch("/{user_id}", response_model=UserResponse)
def update_user(request: ContactUpdateRequest, user_id: UUID = Path(...), db: Session = Depends(get_db)):
    return UserService.update_contact(db, user_id, **request.model_dump(exclude_unset=True))


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID = Path(...), db: Session = Depends(get_db)):
    UserService.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# OWNERS
# ============================================================================

@owners_router.post("", response_model=OwnerResponse, status_code=status.HTTP_201_CREATED)
def create_owner(request: OwnerCreateRequest, db: Session = Depends(get_db)):
    return OwnerService.create_owner(db, **request.model_dump())


@owners_router.get("/{owner_id}", response_model=OwnerResponse)
def get_owner(owner_id: UUID = Path(..., description="The owner ID"), db: Session = Depends(get_db)):
    return OwnerService.get_owner(db, owner_id)


@owners_router.patch("/{owner_id}", response_model=OwnerResponse)
def update_owner(request: OwnerUpdateRequest, owner_id: UUID = Path(...), db: Session = Depends(get_db)):
    return OwnerService.update_contact(db, owner_id, **request.model_dump(exclude_unset=True))


@owners_router.delete("/{owner_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_owner(owner_id: UUID = Path(...), db: Session = Depends(get_db)):
    OwnerService.delete_owner(db, owner_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@owners_router.get("/{owner_id}/businesses", response_model=List[BusinessResponse])
def list_owner_businesses(
        owner_id: UUID = Path(...),
        include_inactive: bool = False,
        db: Session = Depends(get_db)
):
    businesses = BusinessService.list_businesses_for_owner(db, owner_id, include_inactive=include_inactive)
    return [business.to_dict() for business in businesses]
