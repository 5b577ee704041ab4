# app/utils/clock.py
"""Wall clock for scheduling decisions.

Appointment times are stored as naive datetimes in the configured business
timezone, so "now" must be read in that zone too. Operations read it once and
pass the value down.
"""
from datetime import datetime
from zoneinfo import ZoneInfo

from app.config.settings import get_settings


def now() -> datetime:
    settings = get_settings()
    return datetime.now(ZoneInfo(settings.DEFAULT_TIMEZONE)).replace(tzinfo=None)
