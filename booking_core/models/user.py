# ============================================================================
# FILE: booking_core/models/user.py
# Customers who book and owners who run businesses
# ============================================================================
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from booking_core.models.base import Base


class OwnerType(str, enum.Enum):
    """Kind of account that owns businesses."""
    INDIVIDUAL = "INDIVIDUAL"
    ADMIN = "ADMIN"
    CORPORATE = "CORPORATE"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Contact fields, mutable
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    reservations = relationship("Reservation", back_populates="user", passive_deletes="all")

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.name, self.surname) if part)

    def __repr__(self):
        return f"<User {self.email}>"


class Owner(Base):
    __tablename__ = "owners"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)

    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True, index=True)

    owner_type = Column(
        SQLEnum(OwnerType, name="ownertype"),
        default=OwnerType.INDIVIDUAL,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    businesses = relationship("Business", back_populates="owner", passive_deletes="all")

    def __repr__(self):
        return f"<Owner {self.email} ({self.owner_type})>"
