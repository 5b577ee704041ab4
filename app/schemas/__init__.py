# app/schemas/__init__.py
from .booking import (
    CustomerInfo,
    BookingRequest,
    CancelRequest,
    StatusUpdateRequest,
)

from .schedule import (
    WeeklyScheduleRequest,
    ScheduleExceptionRequest,
    HolidayRequest,
)
