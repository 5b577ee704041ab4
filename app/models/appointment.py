# app/models/appointment.py
from datetime import datetime, timedelta
import enum
import uuid

from sqlalchemy import (
    Column, String, Integer, Numeric, Text, DateTime, ForeignKey, Index,
    Enum as SQLEnum, Uuid
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.base import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


class CancelledBy(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    BUSINESS = "BUSINESS"
    SYSTEM = "SYSTEM"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_business_datetime", "business_id", "appointment_datetime"),
        Index("idx_appointments_status_datetime", "status", "appointment_datetime"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Uuid, ForeignKey("services.id"), nullable=False, index=True)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)

    # Appointment details (wall-clock time of the business, naive)
    appointment_datetime = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    # Snapshot of the service at booking time
    service_name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Status tracking
    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.PENDING, nullable=False)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(SQLEnum(CancelledBy), nullable=True)

    # Public access credential
    cancellation_token = Column(String(128), unique=True, nullable=False, index=True)
    cancellation_token_expires_at = Column(DateTime, nullable=False)

    # Reminders & notifications
    reminder_sent_at = Column(DateTime, nullable=True)

    confirmed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business")
    service = relationship("Service")
    customer = relationship("Customer")

    @property
    def end_datetime(self) -> datetime:
        return self.appointment_datetime + timedelta(minutes=self.duration_minutes)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.appointment_datetime < end and self.end_datetime > start

    def token_valid_at(self, now: datetime) -> bool:
        return self.cancellation_token_expires_at > now

    def __repr__(self):
        return f"<Appointment(id={self.id}, status={self.status}, at={self.appointment_datetime})>"

    def to_dict(self, include_token: bool = False):
        """Convert to dictionary for API responses"""
        data = {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "service": {
                "id": str(self.service_id),
                "name": self.service_name,
                "duration_minutes": self.duration_minutes,
                "price": float(self.price),
            },
            "customer": self.customer.to_dict() if self.customer else None,
            "appointment_datetime": self.appointment_datetime.isoformat(),
            "end_datetime": self.end_datetime.isoformat(),
            "status": self.status.value,
            "notes": self.notes,
            "cancellation_reason": self.cancellation_reason,
            "cancelled_by": self.cancelled_by.value if self.cancelled_by else None,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_token:
            data["cancellation_token"] = self.cancellation_token
            data["cancellation_token_expires_at"] = self.cancellation_token_expires_at.isoformat()
        return data
