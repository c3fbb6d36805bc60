from sqlalchemy import (
    Column, Text, Date, Time, Boolean, DateTime, ForeignKey,
    CheckConstraint, Index, Enum as SQLEnum, Uuid, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
from booking_core.models.base import Base
import enum
import uuid


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED})

# Allowed lifecycle moves; anything else is an invalid transition
STATUS_TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)

    # Slot
    reservation_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    # Status tracking; the two flags mirror status for cheap filtering
    status = Column(
        SQLEnum(ReservationStatus, name="reservationstatus"),
        default=ReservationStatus.PENDING,
        nullable=False,
        index=True,
    )
    is_confirmed = Column(Boolean, default=False, nullable=False, index=True)
    is_cancelled = Column(Boolean, default=False, nullable=False, index=True)

    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="reservations")
    business = relationship("Business")

    __table_args__ = (
        # At most one live reservation per (business, date, slot start); cancelled rows free the slot
        Index(
            "uq_reservation_active_slot",
            "business_id", "reservation_date", "start_time",
            unique=True,
            postgresql_where=text("NOT is_cancelled"),
            sqlite_where=text("NOT is_cancelled"),
        ),
        Index("ix_reservation_user_date", "user_id", "reservation_date"),
        Index("ix_reservation_business_date", "business_id", "reservation_date"),
        CheckConstraint("start_time < end_time", name="ck_reservation_time_slot"),
        CheckConstraint("is_cancelled = (status = 'CANCELLED')", name="ck_reservation_cancelled_flag"),
        CheckConstraint(
            "is_confirmed = (status IN ('CONFIRMED', 'COMPLETED'))",
            name="ck_reservation_confirmed_flag",
        ),
    )

    def apply_status(self, status: ReservationStatus) -> None:
        """Set status and the derived flags together."""
        self.status = status
        self.is_confirmed = status in (ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED)
        self.is_cancelled = status == ReservationStatus.CANCELLED
        if self.is_cancelled and self.cancelled_at is None:
            self.cancelled_at = datetime.now(timezone.utc)

    def can_transition_to(self, status: ReservationStatus) -> bool:
        return status in STATUS_TRANSITIONS[ReservationStatus(self.status)]

    @property
    def is_terminal(self) -> bool:
        return ReservationStatus(self.status) in TERMINAL_STATUSES

    def __repr__(self):
        return (
            f"<Reservation(id={self.id}, business_id={self.business_id}, "
            f"{self.reservation_date} {self.start_time}-{self.end_time}, {self.status})>"
        )
