# booking_core/models/business.py
"""
Business Model
A business owns one ReservationSettings row, its availability rules and its reservations.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Float, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from booking_core.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False, index=True)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("owners.id"), nullable=False, index=True)

    # Location descriptor; place_id is the external (maps provider) identifier
    place_id = Column(String(255), nullable=True, index=True)
    address = Column(String(200), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Wall clock used to evaluate "now" for booking policies
    timezone = Column(String(50), default="UTC", nullable=False)

    owner = relationship("Owner", back_populates="businesses")
    settings = relationship("ReservationSettings", back_populates="business", uselist=False)

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "owner_id": str(self.owner_id),
            "location": {
                "place_id": self.place_id,
                "address": self.address,
                "latitude": self.latitude,
                "longitude": self.longitude,
            },
            "timezone": self.timezone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "is_active": self.is_active,
        }
