"""Concurrent bookings against a file-backed database, one session per thread"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, time
from decimal import Decimal
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.config.settings import get_settings
from app.core.exceptions import SlotUnavailable, Timeout
from app.models import Appointment, AppointmentStatus, Base, Business, Customer, Service, WeeklySchedule
from app.schemas.booking import CustomerInfo
from app.services.appointment.booking_service import BookingService
from app.services.appointment.locking import KeyedLock, booking_locks
from tests.conftest import NOW, customer_payload

WORKERS = 8


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'booking.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def shop(file_session_factory):
    db = file_session_factory()
    business = Business(name="Busy Barber", slug="busy-barber")
    db.add(business)
    db.flush()
    service = Service(business_id=business.id, name="Shave", price=Decimal("15.00"), duration_minutes=30)
    db.add(service)
    for day in range(7):
        db.add(WeeklySchedule(
            business_id=business.id, day_of_week=day,
            start_time=time(9, 0), end_time=time(17, 0), slot_duration_minutes=30,
        ))
    db.commit()
    ids = (business.id, service.id)
    db.close()
    return ids


def attempt(session_factory, service_id, start, n, barrier):
    db = session_factory()
    try:
        barrier.wait()
        BookingService.reserve(
            db, "busy-barber", service_id, start,
            CustomerInfo(**customer_payload(phone=f"+44 7700 9000{n:02d}", email=f"c{n}@test.com")),
            now=NOW,
        )
        return "booked"
    except SlotUnavailable:
        return "unavailable"
    finally:
        db.close()


def test_same_window_books_exactly_once(file_session_factory, shop):
    _, service_id = shop
    start = datetime(2025, 12, 3, 10, 0)
    barrier = threading.Barrier(WORKERS)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(
            lambda n: attempt(file_session_factory, service_id, start, n, barrier), range(WORKERS)
        ))

    assert results.count("booked") == 1
    assert results.count("unavailable") == WORKERS - 1

    db = file_session_factory()
    active = db.query(Appointment).filter(Appointment.status == AppointmentStatus.PENDING).all()
    db.close()
    assert len(active) == 1


def test_non_overlapping_windows_all_succeed(file_session_factory, shop):
    _, service_id = shop
    barrier = threading.Barrier(WORKERS)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(
            lambda n: attempt(
                file_session_factory, service_id, datetime(2025, 12, 3, 9 + n // 2, 30 * (n % 2)), n, barrier
            ),
            range(WORKERS),
        ))

    assert results == ["booked"] * WORKERS
    assert len(booking_locks) == 0


def test_keyed_lock_times_out():
    locks = KeyedLock()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold("key", timeout=1):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(Timeout):
            with locks.hold("key", timeout=0.05):
                pass
        # other keys are not blocked
        with locks.hold("other", timeout=0.05):
            pass
    finally:
        release.set()
        thread.join()

    assert len(locks) == 0


def test_reserve_times_out_while_the_day_is_locked(db, business, service, weekly_hours, monkeypatch):
    monkeypatch.setattr(get_settings(), "BOOKING_LOCK_TIMEOUT_SECONDS", 0.05)
    start = datetime(2025, 12, 2, 10, 0)
    held = threading.Event()
    release = threading.Event()

    def holder():
        with booking_locks.hold((business.id, start.date()), timeout=1):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(Timeout):
            BookingService.reserve(
                db, "test-salon", service.id, start, CustomerInfo(**customer_payload()), now=NOW
            )
    finally:
        release.set()
        thread.join()

    assert db.query(Appointment).count() == 0
    assert db.query(Customer).count() == 0
    assert len(booking_locks) == 0
