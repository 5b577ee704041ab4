from datetime import date, datetime, time

import pytest

from app.core.exceptions import NotFound
from app.models import HolidayRange, ScheduleException, WeeklySchedule
from app.services.availability.schedule_resolver import OpenInterval, ScheduleResolver, resolve_day

MONDAY = date(2025, 12, 1)


def weekly(start=time(9, 0), end=time(17, 0), slot=30, active=True):
    return WeeklySchedule(
        day_of_week=0, start_time=start, end_time=end, slot_duration_minutes=slot, is_active=active
    )


def test_weekly_entry_gives_one_interval():
    day = resolve_day(MONDAY, weekly(), None, [])

    assert day.intervals == [OpenInterval(datetime(2025, 12, 1, 9, 0), datetime(2025, 12, 1, 17, 0))]
    assert day.slot_duration_minutes == 30
    assert not day.is_closed


def test_no_weekly_entry_is_closed():
    assert resolve_day(MONDAY, None, None, []).is_closed


def test_inactive_weekly_entry_is_closed():
    assert resolve_day(MONDAY, weekly(active=False), None, []).is_closed


def test_closed_exception_wins_over_weekly():
    exception = ScheduleException(exception_date=MONDAY, is_closed=True)
    assert resolve_day(MONDAY, weekly(), exception, []).is_closed


def test_special_hours_replace_weekly_hours():
    exception = ScheduleException(
        exception_date=MONDAY, is_closed=False, start_time=time(13, 0), end_time=time(15, 0)
    )
    day = resolve_day(MONDAY, weekly(), exception, [])

    assert day.intervals == [OpenInterval(datetime(2025, 12, 1, 13, 0), datetime(2025, 12, 1, 15, 0))]


def test_special_hours_open_a_day_without_weekly_hours():
    exception = ScheduleException(
        exception_date=MONDAY, is_closed=False, start_time=time(10, 0), end_time=time(11, 0)
    )
    day = resolve_day(MONDAY, None, exception, [], default_slot_duration=15)

    assert len(day.intervals) == 1
    assert day.slot_duration_minutes == 15


def test_holiday_wins_over_special_hours():
    exception = ScheduleException(
        exception_date=MONDAY, is_closed=False, start_time=time(10, 0), end_time=time(11, 0)
    )
    holiday = HolidayRange(start_date=date(2025, 11, 30), end_date=date(2025, 12, 2))

    assert resolve_day(MONDAY, weekly(), exception, [holiday]).is_closed


def test_holiday_bounds_are_inclusive():
    holiday = HolidayRange(start_date=MONDAY, end_date=MONDAY)
    assert resolve_day(MONDAY, weekly(), None, [holiday]).is_closed


def test_resolver_loads_rules_from_database(db, business, weekly_hours):
    db.add(HolidayRange(business_id=business.id, start_date=date(2025, 12, 24), end_date=date(2025, 12, 26)))
    db.add(ScheduleException(business_id=business.id, exception_date=date(2025, 12, 2), is_closed=True))
    db.commit()

    assert not ScheduleResolver.resolve(db, business.id, MONDAY).is_closed
    assert ScheduleResolver.resolve(db, business.id, date(2025, 12, 2)).is_closed
    assert ScheduleResolver.resolve(db, business.id, date(2025, 12, 25)).is_closed
    # Saturday, no weekly hours
    assert ScheduleResolver.resolve(db, business.id, date(2025, 12, 6)).is_closed


def test_resolver_unknown_business(db):
    import uuid

    with pytest.raises(NotFound):
        ScheduleResolver.resolve(db, uuid.uuid4(), MONDAY)
