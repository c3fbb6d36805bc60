# booking_core/schemas/__init__.py
from .user import (
    UserCreateRequest,
    ContactUpdateRequest,
    UserResponse,
    OwnerCreateRequest,
    OwnerUpdateRequest,
    OwnerResponse
)

from .business import (
    LocationSchema,
    BusinessCreateRequest,
    BusinessUpdateRequest,
    BusinessResponse
)

from .settings import (
    ReservationSettingsUpdateRequest,
    ReservationSettingsResponse
)

from .availability import (
    TimeWindowSchema,
    AvailabilityRuleRequest,
    AvailabilityRuleResponse,
    AvailabilityResponse,
    AvailabilityRangeResponse,
    SlotBoardEntry,
    SlotBoardResponse
)

from .reservation import (
    ReservationCreateRequest,
    CancelReservationRequest,
    ReservationResponse
)
