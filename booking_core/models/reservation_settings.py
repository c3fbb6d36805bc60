# booking_core/models/reservation_settings.py
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from booking_core.models.base import Base


class ReservationSettings(Base):
    """Booking policy for one business (exactly one row per business)"""
    __tablename__ = "reservation_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    slot_duration_minutes = Column(Integer, default=30, nullable=False)
    buffer_minutes = Column(Integer, default=0, nullable=False)  # Gap between consecutive slots

    min_advance_booking_hours = Column(Integer, default=2, nullable=False)  # Lead time
    max_advance_booking_days = Column(Integer, default=30, nullable=False)
    cancellation_window_hours = Column(Integer, default=0, nullable=False)

    accept_reservations = Column(Boolean, default=True, nullable=False)
    auto_confirm = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="settings")

    __table_args__ = (
        CheckConstraint("slot_duration_minutes > 0", name="ck_settings_slot_duration"),
        CheckConstraint("buffer_minutes >= 0", name="ck_settings_buffer"),
    )

    def __repr__(self):
        return f"<ReservationSettings(business_id={self.business_id}, slot={self.slot_duration_minutes}m)>"
