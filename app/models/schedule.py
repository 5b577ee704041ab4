# ===== app/models/schedule.py =====
from sqlalchemy import (
    Column, String, Integer, Boolean, Time, Date, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Uuid
)
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class WeeklySchedule(Base):
    """Business opening hours for one day of the week"""
    __tablename__ = "weekly_schedules"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_weekly_schedules_business_day"),
        CheckConstraint("start_time < end_time", name="ck_weekly_schedules_time_order"),
        CheckConstraint(
            "slot_duration_minutes BETWEEN 5 AND 240",
            name="ck_weekly_schedules_slot_duration",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_duration_minutes = Column(Integer, default=30, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "slot_duration_minutes": self.slot_duration_minutes,
            "is_active": self.is_active,
        }


class ScheduleException(Base):
    """Specific date overrides (closed day or special hours)"""
    __tablename__ = "schedule_exceptions"
    __table_args__ = (
        UniqueConstraint("business_id", "exception_date", name="uq_schedule_exceptions_business_date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    exception_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, default=True, nullable=False)  # False = special hours below
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    reason = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "date": self.exception_date.isoformat(),
            "is_closed": self.is_closed,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "reason": self.reason,
        }
