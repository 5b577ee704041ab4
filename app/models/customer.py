# app/models/customer.py
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Customer(Base):
    """A business's customer, matched by phone (then email) at booking time"""
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("business_id", "phone", name="uq_customers_business_phone"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(
        Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Aggregates maintained by the booking path
    total_appointments = Column(Integer, default=0, nullable=False)
    last_appointment_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            "id": str(self.id),
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "total_appointments": self.total_appointments,
            "last_appointment_at": self.last_appointment_at.isoformat() if self.last_appointment_at else None,
        }
