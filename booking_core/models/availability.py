# ===== booking_core/models/availability.py =====
from sqlalchemy import (
    Column, String, Integer, Boolean, Time, Date, DateTime, ForeignKey, JSON,
    CheckConstraint, Index, Enum as SQLEnum, Uuid,
)
from sqlalchemy.sql import func
from booking_core.models.base import Base
import enum
import uuid


class AvailabilityType(str, enum.Enum):
    RECURRING_WEEKLY = "RECURRING_WEEKLY"  # every <day_of_week>
    DATE_RANGE = "DATE_RANGE"              # seasonal hours, vacations
    SPECIFIC_DATE = "SPECIFIC_DATE"        # holidays, one-off exceptions


class BusinessAvailability(Base):
    """When a business is open. Superseded rules are deactivated, never deleted."""
    __tablename__ = "business_availability"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)

    availability_type = Column(SQLEnum(AvailabilityType, name="availabilitytype"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=True, index=True)  # 0=Monday, 6=Sunday
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    specific_date = Column(Date, nullable=True, index=True)

    # Open interval for the day; both null when is_closed
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    is_closed = Column(Boolean, default=False, nullable=False)

    # [{"start": "12:00", "end": "13:00"}, ...] carved out of the open interval
    blocked_windows = Column(JSON, default=list, nullable=False)
    block_reason = Column(String, nullable=True)  # "Holiday", "Lunch", etc.

    priority = Column(Integer, default=0, nullable=False)  # Higher wins among equally specific rules
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    superseded_by_id = Column(Uuid(as_uuid=True), ForeignKey("business_availability.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR start_date <= end_date",
            name="ck_availability_date_range",
        ),
        CheckConstraint(
            "start_time IS NULL OR end_time IS NULL OR start_time < end_time",
            name="ck_availability_open_hours",
        ),
        Index("ix_availability_date_range", "start_date", "end_date"),
        Index("ix_availability_weekly", "business_id", "availability_type", "day_of_week"),
        Index("ix_availability_date", "business_id", "specific_date"),
    )

    def __repr__(self):
        return f"<BusinessAvailability(business_id={self.business_id}, type={self.availability_type})>"
