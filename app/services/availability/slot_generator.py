# ===== app/services/availability/slot_generator.py =====
"""Slices open intervals into fixed-length slots and marks each free or taken"""
from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, NamedTuple, Optional

from app.models.appointment import Appointment, ACTIVE_STATUSES
from app.services.availability.schedule_resolver import OpenInterval


class Slot(NamedTuple):
    start: datetime
    end: datetime
    available: bool

    def to_dict(self):
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "available": self.available,
        }


def blocking_appointments(
        appointments: Iterable[Appointment],
        start: datetime,
        end: datetime
) -> List[Appointment]:
    """Active appointments whose span overlaps [start, end)"""
    return [
        appointment for appointment in appointments
        if appointment.status in ACTIVE_STATUSES and appointment.overlaps(start, end)
    ]


def generate_slots(
        intervals: Iterable[OpenInterval],
        slot_duration_minutes: int,
        appointments: Iterable[Appointment],
        service_duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None
) -> Iterator[Slot]:
    """
    Yield slots in chronological order.

    Slots are cut every `slot_duration_minutes` from each interval start and the
    trailing remainder shorter than one unit is dropped. A slot is available when
    the service starting there still ends inside the interval, nothing PENDING or
    CONFIRMED overlaps it, and it starts after `now`.
    """
    if slot_duration_minutes <= 0:
        raise ValueError("slot_duration_minutes must be positive")

    step = timedelta(minutes=slot_duration_minutes)
    service_span = timedelta(minutes=service_duration_minutes or slot_duration_minutes)
    appointments = list(appointments)

    for interval in intervals:
        slot_start = interval.start
        while slot_start + step <= interval.end:
            slot_end = slot_start + step
            window_end = max(slot_end, slot_start + service_span)

            available = (
                window_end <= interval.end
                and (now is None or slot_start > now)
                and not blocking_appointments(appointments, slot_start, window_end)
            )
            yield Slot(slot_start, slot_end, available)

            slot_start = slot_end
