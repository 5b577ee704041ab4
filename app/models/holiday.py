# app/models/holiday.py
from datetime import date
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class HolidayRange(Base):
    """A closed period, inclusive on both ends. Ranges may overlap."""
    __tablename__ = "business_holidays"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_business_holidays_date_order"),
        Index("idx_business_holidays_dates", "business_id", "start_date", "end_date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self):
        return {
            "id": str(self.id),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
        }
