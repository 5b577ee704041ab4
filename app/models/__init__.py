# app/models/__init__.py
from .base import Base
from .business import Business
from .service import Service
from .customer import Customer
from .schedule import WeeklySchedule, ScheduleException
from .holiday import HolidayRange
from .appointment import Appointment, AppointmentStatus, CancelledBy, ACTIVE_STATUSES
from .notification import Notification, NotificationKind, NotificationChannel, NotificationStatus

__all__ = [
    "Base",
    "Business",
    "Service",
    "Customer",
    "WeeklySchedule",
    "ScheduleException",
    "HolidayRange",
    "Appointment",
    "AppointmentStatus",
    "CancelledBy",
    "ACTIVE_STATUSES",
    "Notification",
    "NotificationKind",
    "NotificationChannel",
    "NotificationStatus",
]
