from datetime import datetime, timedelta

from app.models import AppointmentStatus, Notification, NotificationKind
from app.services.appointment import sweep_service
from app.services.appointment.lifecycle import AppointmentLifecycle
from app.services.appointment.sweep_service import AppointmentSweeper
from tests.conftest import NOW, make_appointment


def test_completes_only_ended_confirmed_appointments(db, business, service):
    ended = make_appointment(db, business, service, NOW - timedelta(hours=3))
    pending = make_appointment(db, business, service, NOW - timedelta(hours=2), status=AppointmentStatus.PENDING)
    running = make_appointment(db, business, service, NOW - timedelta(minutes=15))
    upcoming = make_appointment(db, business, service, NOW + timedelta(hours=1))

    result = AppointmentSweeper.auto_complete(db, now=NOW)

    assert result == {"candidates": 1, "completed": 1, "failed": 0}
    db.refresh(ended)
    assert ended.status == AppointmentStatus.COMPLETED
    assert ended.completed_at == NOW
    for appointment, status in ((pending, AppointmentStatus.PENDING),
                                (running, AppointmentStatus.CONFIRMED),
                                (upcoming, AppointmentStatus.CONFIRMED)):
        db.refresh(appointment)
        assert appointment.status == status


def test_one_failure_does_not_stop_the_batch(db, business, service, monkeypatch):
    first = make_appointment(db, business, service, NOW - timedelta(hours=5))
    broken = make_appointment(db, business, service, NOW - timedelta(hours=4))
    last = make_appointment(db, business, service, NOW - timedelta(hours=3))

    real_transition = AppointmentLifecycle.transition

    def flaky_transition(db, appointment, *args, **kwargs):
        if appointment.id == broken.id:
            raise RuntimeError("row locked")
        return real_transition(db, appointment, *args, **kwargs)

    monkeypatch.setattr(sweep_service.AppointmentLifecycle, "transition", flaky_transition)

    result = AppointmentSweeper.auto_complete(db, now=NOW)

    assert result == {"candidates": 3, "completed": 2, "failed": 1}
    for appointment, status in ((first, AppointmentStatus.COMPLETED),
                                (broken, AppointmentStatus.CONFIRMED),
                                (last, AppointmentStatus.COMPLETED)):
        db.refresh(appointment)
        assert appointment.status == status


def test_second_run_is_a_no_op(db, business, service):
    make_appointment(db, business, service, NOW - timedelta(hours=3))

    AppointmentSweeper.auto_complete(db, now=NOW)
    assert AppointmentSweeper.auto_complete(db, now=NOW)["candidates"] == 0


def test_reminders_for_the_next_day_window(db, business, service, queued_notifications):
    tomorrow = make_appointment(db, business, service, NOW + timedelta(hours=24))
    too_soon = make_appointment(db, business, service, NOW + timedelta(hours=5))
    too_far = make_appointment(db, business, service, NOW + timedelta(hours=30))
    cancelled = make_appointment(
        db, business, service, NOW + timedelta(hours=23, minutes=30), status=AppointmentStatus.CANCELLED
    )

    result = AppointmentSweeper.enqueue_reminders(db, now=NOW)

    assert result == {"appointments": 1, "queued": 1}
    notification = db.query(Notification).one()
    assert notification.kind == NotificationKind.REMINDER
    assert notification.appointment_id == tomorrow.id
    assert queued_notifications == [str(notification.id)]

    db.refresh(tomorrow)
    assert tomorrow.reminder_sent_at == NOW
    for appointment in (too_soon, too_far, cancelled):
        db.refresh(appointment)
        assert appointment.reminder_sent_at is None

    # already reminded
    assert AppointmentSweeper.enqueue_reminders(db, now=NOW + timedelta(minutes=30))["appointments"] == 0
