"""
Pydantic schemas for weekly hours, dated exceptions and holidays
"""
from datetime import date, time
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class WeeklyScheduleRequest(BaseModel):
    """Create or replace the hours for one day of the week"""
    day_of_week: int = Field(..., ge=0, le=6, description="0=Monday, 6=Sunday")
    start_time: time
    end_time: time
    slot_duration_minutes: int = Field(30, ge=5, le=240)
    is_active: bool = True

    @model_validator(mode="after")
    def check_time_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class ScheduleExceptionRequest(BaseModel):
    exception_date: date
    is_closed: bool = True
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_override_hours(self):
        if self.is_closed:
            self.start_time = None
            self.end_time = None
            return self
        if self.start_time is None or self.end_time is None:
            raise ValueError("Special hours need both start_time and end_time")
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class HolidayRequest(BaseModel):
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date")
        return self
