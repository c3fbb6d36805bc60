"""
Typed errors raised by the booking core.
Every error carries a stable error_code so callers can branch without parsing messages,
plus one helper that maps them onto HTTP status codes for the API layer.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Type


class BookingCoreError(Exception):
    """Base class for every error the core surfaces to callers."""

    error_code = "BOOKING_CORE_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.error_code, "detail": self.message}


class NotFoundError(BookingCoreError):
    """A referenced entity id does not resolve."""

    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} not found with id: {entity_id}",
            error_code=f"{_code_name(entity)}_NOT_FOUND",
        )
        self.entity = entity
        self.entity_id = entity_id


class DuplicateKeyError(BookingCoreError):
    """A store-level uniqueness constraint rejected the write."""

    error_code = "DUPLICATE_KEY"

    def __init__(self, entity: str, fields: Optional[Dict[str, Any]] = None, message: Optional[str] = None):
        fields = fields or {}
        if message is None:
            described = ", ".join(f"{k}={v}" for k, v in fields.items())
            message = f"{entity} already exists" + (f" ({described})" if described else "")
        super().__init__(message)
        self.entity = entity
        self.fields = fields


class SlotAlreadyBookedError(DuplicateKeyError):
    """Another active reservation holds the (business, date, slot start) key."""

    error_code = "RESERVATION_CONFLICT"

    def __init__(self, business_id: Any, reservation_date: Any, start_time: Any):
        super().__init__(
            "Reservation",
            {"business_id": business_id, "reservation_date": reservation_date, "start_time": start_time},
            message=f"Slot {reservation_date} {start_time} is already booked for business {business_id}",
        )
        self.business_id = business_id
        self.reservation_date = reservation_date
        self.start_time = start_time


class OutsideAvailabilityError(BookingCoreError):
    """The requested slot is not one of the business's open slots for that date."""

    error_code = "OUTSIDE_AVAILABILITY"


class PolicyViolationError(BookingCoreError):
    """The request breaks a ReservationSettings policy (lead time, window, ...)."""

    error_code = "POLICY_VIOLATION"


class InvalidStatusTransitionError(BookingCoreError):
    """The reservation lifecycle does not allow the requested transition."""

    error_code = "INVALID_STATUS_TRANSITION"

    def __init__(self, reservation_id: Any, current: Any, target: Any):
        super().__init__(f"Reservation {reservation_id} cannot move from {current} to {target}")
        self.reservation_id = reservation_id
        self.current = current
        self.target = target


class AmbiguousAvailabilityError(BookingCoreError):
    """Active rules of equal specificity and priority disagree; an operator must fix them."""

    error_code = "AMBIGUOUS_AVAILABILITY"


class InvalidAvailabilityRuleError(BookingCoreError):
    """An availability rule is malformed and was rejected at write time."""

    error_code = "INVALID_AVAILABILITY_RULE"


class InvalidInputError(BookingCoreError, ValueError):
    """Arguments were rejected before anything was written (unknown fields, bad values)."""

    error_code = "VALIDATION_ERROR"


def _code_name(entity: str) -> str:
    # "ReservationSettings" -> "RESERVATION_SETTINGS"
    out = []
    for i, ch in enumerate(entity):
        if ch.isupper() and i and not entity[i - 1].isupper():
            out.append("_")
        out.append(ch.upper())
    return "".join(out).replace(" ", "_")


# ---------------------------------------------------------------------------
# HTTP mapping: most specific class first, first match wins.
# ---------------------------------------------------------------------------

STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_UNPROCESSABLE = 422
STATUS_INTERNAL_ERROR = 500

ERROR_STATUS_RULES: list[tuple[Type[BookingCoreError], int]] = [
    (NotFoundError, STATUS_NOT_FOUND),
    (SlotAlreadyBookedError, STATUS_CONFLICT),
    (DuplicateKeyError, STATUS_CONFLICT),
    (InvalidStatusTransitionError, STATUS_CONFLICT),
    (OutsideAvailabilityError, STATUS_UNPROCESSABLE),
    (PolicyViolationError, STATUS_UNPROCESSABLE),
    (InvalidAvailabilityRuleError, STATUS_UNPROCESSABLE),
    (InvalidInputError, STATUS_UNPROCESSABLE),
    (AmbiguousAvailabilityError, STATUS_INTERNAL_ERROR),
]


def error_to_http_status(exc: BookingCoreError) -> int:
    """Map a core error onto an HTTP status code using ERROR_STATUS_RULES."""
    for error_type, status_code in ERROR_STATUS_RULES:
        if isinstance(exc, error_type):
            return status_code
    return STATUS_INTERNAL_ERROR
