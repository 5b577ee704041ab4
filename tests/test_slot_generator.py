from datetime import datetime, timedelta

import pytest

from app.models import Appointment, AppointmentStatus
from app.services.availability.schedule_resolver import OpenInterval
from app.services.availability.slot_generator import generate_slots

MORNING = OpenInterval(datetime(2025, 12, 1, 9, 0), datetime(2025, 12, 1, 12, 0))


def appointment_at(hour, minute=0, duration=30, status=AppointmentStatus.CONFIRMED):
    return Appointment(
        appointment_datetime=datetime(2025, 12, 1, hour, minute),
        duration_minutes=duration,
        status=status,
    )


def test_empty_morning_gives_six_free_slots():
    slots = list(generate_slots([MORNING], 30, []))

    assert len(slots) == 6
    assert all(slot.available for slot in slots)
    assert slots[0].start == datetime(2025, 12, 1, 9, 0)
    assert slots[-1].end == datetime(2025, 12, 1, 12, 0)


def test_confirmed_appointment_blocks_only_its_slot():
    slots = list(generate_slots([MORNING], 30, [appointment_at(10)]))

    taken = [slot.start for slot in slots if not slot.available]
    assert taken == [datetime(2025, 12, 1, 10, 0)]


def test_cancelled_and_completed_appointments_do_not_block():
    appointments = [
        appointment_at(10, status=AppointmentStatus.CANCELLED),
        appointment_at(11, status=AppointmentStatus.COMPLETED),
    ]
    assert all(slot.available for slot in generate_slots([MORNING], 30, appointments))


def test_pending_appointment_blocks():
    slots = list(generate_slots([MORNING], 30, [appointment_at(9, status=AppointmentStatus.PENDING)]))
    assert not slots[0].available


def test_trailing_partial_slot_is_dropped():
    interval = OpenInterval(datetime(2025, 12, 1, 9, 0), datetime(2025, 12, 1, 10, 40))
    slots = list(generate_slots([interval], 30, []))

    assert [slot.start.minute for slot in slots] == [0, 30, 0]
    assert slots[-1].end == datetime(2025, 12, 1, 10, 30)


def test_slots_never_overlap_and_stay_inside_intervals():
    intervals = [
        MORNING,
        OpenInterval(datetime(2025, 12, 1, 13, 0), datetime(2025, 12, 1, 17, 15)),
    ]
    for granularity in (5, 15, 25, 45, 60, 240):
        slots = list(generate_slots(intervals, granularity, []))
        for earlier, later in zip(slots, slots[1:]):
            assert earlier.end <= later.start
        for slot in slots:
            assert slot.end - slot.start == timedelta(minutes=granularity)
            assert any(i.start <= slot.start and slot.end <= i.end for i in intervals)


def test_long_service_needs_the_whole_window():
    # a 60 minute service cannot start in the last 30 minute slot
    slots = list(generate_slots([MORNING], 30, [], service_duration_minutes=60))
    assert not slots[-1].available
    assert all(slot.available for slot in slots[:-1])


def test_long_service_blocked_by_later_appointment():
    slots = list(generate_slots([MORNING], 30, [appointment_at(10)], service_duration_minutes=60))
    by_start = {slot.start.strftime("%H:%M"): slot.available for slot in slots}

    assert by_start["09:00"] is True
    assert by_start["09:30"] is False
    assert by_start["10:00"] is False
    assert by_start["10:30"] is True


def test_slots_at_or_before_now_are_unavailable():
    now = datetime(2025, 12, 1, 10, 0)
    slots = list(generate_slots([MORNING], 30, [], now=now))

    assert [slot.available for slot in slots] == [False, False, False, True, True, True]


def test_rejects_non_positive_granularity():
    with pytest.raises(ValueError):
        list(generate_slots([MORNING], 0, []))
