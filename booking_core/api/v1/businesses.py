"""
Business Management Routes
Onboarding, location updates, soft delete and reservation settings
"""
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session
from uuid import UUID

from booking_core.config.database import get_db
from booking_core.core.errors import NotFoundError
from booking_core.schemas.business import BusinessCreateRequest, BusinessResponse, BusinessUpdateRequest
from booking_core.schemas.settings import ReservationSettingsResponse, ReservationSettingsUpdateRequest
from booking_core.services.business.business_service import BusinessService
from booking_core.services.settings.reservation_settings_service import ReservationSettingsService

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.post("", response_model=BusinessResponse, status_code=status.HTTP_201_CREATED)
def create_business(request: BusinessCreateRequest, db: Session = Depends(get_db)):
    """
    Onboard a business for an owner.
    Its ReservationSettings row is created in the same transaction.
    """
    overrides = request.settings.model_dump(exclude_unset=True) if request.settings else {}
    business = BusinessService.create_business(
        db,
        owner_id=request.owner_id,
        name=request.name,
        timezone=request.timezone,
        **request.location.model_dump(),
        **overrides,
    )
    return business.to_dict()


@router.get("/by-place/{place_id}", response_model=BusinessResponse)
def get_business_by_place(place_id: str, db: Session = Depends(get_db)):
    business = BusinessService.get_business_by_place_id(db, place_id)
    if business is None:
        raise NotFoundError("Business", place_id)
    return business.to_dict()


@router.get("/{business_id}", response_model=BusinessResponse)
def get_business(business_id: UUID = Path(..., description="The business ID"), db: Session = Depends(get_db)):
    return BusinessService.get_business(db, business_id).to_dict()


@router.patch("/{business_id}", response_model=BusinessResponse)
def update_business(request: BusinessUpdateRequest, business_id: UUID = Path(...), db: Session = Depends(get_db)):
    """Only send the fields you want to change."""
    return BusinessService.update_business(db, business_id, **request.to_changes()).to_dict()


@router.delete("/{business_id}", response_model=BusinessResponse)
def deactivate_business(business_id: UUID = Path(...), db: Session = Depends(get_db)):
    """Soft delete. Rules and reservations are kept."""
    return BusinessService.deactivate_business(db, business_id).to_dict()


# ============================================================================
# RESERVATION SETTINGS
# ============================================================================

@router.get("/{business_id}/settings", response_model=ReservationSettingsResponse)
def get_settings(business_id: UUID = Path(...), db: Session = Depends(get_db)):
    return ReservationSettingsService.get_settings(db, business_id)


@router.put("/{business_id}/settings", response_model=ReservationSettingsResponse)
def save_settings(
        request: ReservationSettingsUpdateRequest,
        business_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    """Create or patch the business's booking policy"""
    return ReservationSettingsService.create_or_update(db, business_id, **request.model_dump(exclude_unset=True))


@router.delete("/{business_id}/settings", status_code=status.HTTP_204_NO_CONTENT)
def delete_settings(business_id: UUID = Path(...), db: Session = Depends(get_db)):
    """Drop stored settings; availability falls back to the configured defaults"""
    ReservationSettingsService.delete_settings(db, business_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
