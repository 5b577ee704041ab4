# app/models/notification.py
"""
Notification outbox.
Rows are written in the same transaction as the appointment change that
caused them; delivery happens later in a Celery worker.
"""
import enum
import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Enum as SQLEnum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.base import Base


class NotificationKind(str, enum.Enum):
    CONFIRMATION = "CONFIRMATION"
    CANCELLATION = "CANCELLATION"
    REMINDER = "REMINDER"
    MODIFICATION = "MODIFICATION"


class NotificationChannel(str, enum.Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"


class NotificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )

    kind = Column(SQLEnum(NotificationKind), nullable=False)
    channel = Column(SQLEnum(NotificationChannel), nullable=False)
    recipient = Column(String(255), nullable=False)

    status = Column(SQLEnum(NotificationStatus), default=NotificationStatus.PENDING, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    sent_at = Column(DateTime(timezone=True), nullable=True)

    appointment = relationship("Appointment")

    def __repr__(self):
        return f"<Notification(id={self.id}, kind={self.kind}, channel={self.channel})>"
