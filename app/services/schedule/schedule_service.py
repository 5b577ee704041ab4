# ============================================================================
# app/services/schedule/schedule_service.py
# Weekly hours and dated exceptions for the authenticated business
# ============================================================================
from datetime import date, timedelta
import logging
from typing import Dict, List
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.schedule import WeeklySchedule, ScheduleException
from app.schemas.schedule import WeeklyScheduleRequest, ScheduleExceptionRequest
from app.services.availability.schedule_resolver import ScheduleResolver

logger = logging.getLogger(__name__)

MAX_PREVIEW_DAYS = 62


class ScheduleService:
    """Handles opening hours configuration"""

    # ==================== Weekly hours ====================

    @staticmethod
    def list_weekly(db: Session, business_id: UUID) -> List[WeeklySchedule]:
        return db.query(WeeklySchedule).filter(
            WeeklySchedule.business_id == business_id
        ).order_by(WeeklySchedule.day_of_week.asc()).all()

    @staticmethod
    def upsert_weekly(db: Session, business_id: UUID, request: WeeklyScheduleRequest) -> WeeklySchedule:
        """Create or replace the hours for one day of the week"""
        entry = db.query(WeeklySchedule).filter(
            WeeklySchedule.business_id == business_id,
            WeeklySchedule.day_of_week == request.day_of_week
        ).first()

        if entry is None:
            entry = WeeklySchedule(business_id=business_id, day_of_week=request.day_of_week)
            db.add(entry)

        entry.start_time = request.start_time
        entry.end_time = request.end_time
        entry.slot_duration_minutes = request.slot_duration_minutes
        entry.is_active = request.is_active

        db.commit()
        db.refresh(entry)
        logger.info(f"Weekly hours set for business {business_id}, day {request.day_of_week}")
        return entry

    @staticmethod
    def deactivate_weekly(db: Session, business_id: UUID, day_of_week: int) -> WeeklySchedule:
        entry = db.query(WeeklySchedule).filter(
            WeeklySchedule.business_id == business_id,
            WeeklySchedule.day_of_week == day_of_week
        ).first()
        if not entry:
            raise NotFound("No hours configured for this day")

        entry.is_active = False
        db.commit()
        db.refresh(entry)
        return entry

    # ==================== Exceptions ====================

    @staticmethod
    def list_exceptions(db: Session, business_id: UUID, from_date: date = None) -> List[ScheduleException]:
        query = db.query(ScheduleException).filter(ScheduleException.business_id == business_id)
        if from_date:
            query = query.filter(ScheduleException.exception_date >= from_date)
        return query.order_by(ScheduleException.exception_date.asc()).all()

    @staticmethod
    def upsert_exception(db: Session, business_id: UUID, request: ScheduleExceptionRequest) -> ScheduleException:
        """Close a date or give it special hours. Existing bookings are left alone."""
        exception = db.query(ScheduleException).filter(
            ScheduleException.business_id == business_id,
            ScheduleException.exception_date == request.exception_date
        ).first()

        if exception is None:
            exception = ScheduleException(business_id=business_id, exception_date=request.exception_date)
            db.add(exception)

        exception.is_closed = request.is_closed
        exception.start_time = request.start_time
        exception.end_time = request.end_time
        exception.reason = request.reason

        db.commit()
        db.refresh(exception)
        logger.info(f"Schedule exception set for business {business_id} on {request.exception_date}")
        return exception

    @staticmethod
    def delete_exception(db: Session, business_id: UUID, exception_id: UUID):
        exception = db.query(ScheduleException).filter(
            ScheduleException.id == exception_id,
            ScheduleException.business_id == business_id
        ).first()
        if not exception:
            raise NotFound("Schedule exception not found")

        db.delete(exception)
        db.commit()

    # ==================== Preview ====================

    @staticmethod
    def open_intervals(db: Session, business_id: UUID, start_date: date, end_date: date) -> List[Dict]:
        """Resolved opening hours per date, holidays and exceptions applied"""
        if end_date < start_date:
            raise ValidationError("End date must be after or equal to start date")
        if (end_date - start_date).days >= MAX_PREVIEW_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_PREVIEW_DAYS} days")

        days = []
        current = start_date
        while current <= end_date:
            day = ScheduleResolver.resolve(db, business_id, current)
            days.append({
                "date": current.isoformat(),
                "is_closed": day.is_closed,
                "slot_duration_minutes": day.slot_duration_minutes,
                "intervals": [
                    {"start": interval.start.isoformat(), "end": interval.end.isoformat()}
                    for interval in day.intervals
                ],
            })
            current += timedelta(days=1)
        return days
