# ===== app/services/availability/schedule_resolver.py =====
"""Turns weekly hours, dated exceptions and holidays into open intervals for one date"""
from datetime import date, datetime
from typing import List, NamedTuple, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import NotFound
from app.models.business import Business
from app.models.holiday import HolidayRange
from app.models.schedule import WeeklySchedule, ScheduleException
import logging

logger = logging.getLogger(__name__)


class OpenInterval(NamedTuple):
    start: datetime
    end: datetime


class DaySchedule(NamedTuple):
    """Resolved opening for a single date"""
    date: date
    intervals: List[OpenInterval]
    slot_duration_minutes: int

    @property
    def is_closed(self) -> bool:
        return not self.intervals


def resolve_day(
        target_date: date,
        weekly_entry: Optional[WeeklySchedule],
        exception: Optional[ScheduleException],
        holidays: Sequence[HolidayRange],
        default_slot_duration: int = 30
) -> DaySchedule:
    """
    Resolve the open intervals of one date from already-loaded rules.

    Precedence:
    1. Any holiday covering the date closes it
    2. A schedule exception for the date replaces the weekly entry
    3. Otherwise the active weekly entry for the day of week applies
    """
    granularity = weekly_entry.slot_duration_minutes if weekly_entry else default_slot_duration
    closed = DaySchedule(target_date, [], granularity)

    if any(holiday.covers(target_date) for holiday in holidays):
        return closed

    if exception is not None:
        if exception.is_closed:
            return closed
        if exception.start_time is not None and exception.end_time is not None:
            start_time, end_time = exception.start_time, exception.end_time
        elif weekly_entry is not None and weekly_entry.is_active:
            start_time, end_time = weekly_entry.start_time, weekly_entry.end_time
        else:
            return closed
    elif weekly_entry is None or not weekly_entry.is_active:
        return closed
    else:
        start_time, end_time = weekly_entry.start_time, weekly_entry.end_time

    if start_time >= end_time:
        return closed

    interval = OpenInterval(
        datetime.combine(target_date, start_time),
        datetime.combine(target_date, end_time),
    )
    return DaySchedule(target_date, [interval], granularity)


class ScheduleResolver:
    """Loads a business's rules for a date and resolves them"""

    @staticmethod
    def resolve(db: Session, business_id: UUID, target_date: date) -> DaySchedule:
        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            raise NotFound("Business not found")

        weekly_entry = db.query(WeeklySchedule).filter(
            WeeklySchedule.business_id == business_id,
            WeeklySchedule.day_of_week == target_date.weekday(),
            WeeklySchedule.is_active == True  # noqa: E712
        ).first()

        exception = db.query(ScheduleException).filter(
            ScheduleException.business_id == business_id,
            ScheduleException.exception_date == target_date
        ).first()

        holidays = db.query(HolidayRange).filter(
            HolidayRange.business_id == business_id,
            HolidayRange.start_date <= target_date,
            HolidayRange.end_date >= target_date
        ).all()

        day = resolve_day(
            target_date,
            weekly_entry,
            exception,
            holidays,
            default_slot_duration=get_settings().DEFAULT_SLOT_DURATION_MINUTES,
        )

        if day.is_closed:
            logger.debug(f"Business {business_id} is closed on {target_date}")
        return day
