# app/models/business.py
"""
Business Model
A business publishes its weekly hours and receives public bookings via its slug.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)

    # System configuration
    timezone = Column(String(50), default="UTC")

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete

    services = relationship("Service", back_populates="business")

    @property
    def is_bookable(self) -> bool:
        return bool(self.is_active) and self.deleted_at is None

    def __repr__(self):
        return f"<Business(id={self.id}, slug={self.slug})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "timezone": self.timezone,
            "is_active": self.is_active,
        }
