import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEFAULT_TIMEZONE"] = "UTC"

from datetime import datetime, time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import create_access_token
from app.config.database import get_db
from app.main import app
from app.models import Base, Business, Service, WeeklySchedule
from app.utils import clock

# Monday
NOW = datetime(2025, 12, 1, 8, 0)


# ------------------ engine ------------------
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ------------------ clock / notifications ------------------
@pytest.fixture(autouse=True)
def frozen_now(monkeypatch):
    monkeypatch.setattr(clock, "now", lambda: NOW)
    return NOW


@pytest.fixture(autouse=True)
def queued_notifications(monkeypatch):
    """Notification ids handed to the worker, in order"""
    queued = []
    monkeypatch.setattr(
        "app.services.notification.notification_service.queue_notification",
        queued.append,
    )
    return queued


# ------------------ data ------------------
@pytest.fixture
def business(db):
    business = Business(name="Test Salon", slug="test-salon", email="salon@test.com", timezone="UTC")
    db.add(business)
    db.commit()
    return business


@pytest.fixture
def service(db, business):
    service = Service(
        business_id=business.id,
        name="Haircut",
        price=Decimal("25.00"),
        duration_minutes=30,
        is_active=True,
    )
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def weekly_hours(db, business):
    """Monday to Friday, 09:00-12:00, 30 minute slots"""
    entries = [
        WeeklySchedule(
            business_id=business.id,
            day_of_week=day,
            start_time=time(9, 0),
            end_time=time(12, 0),
            slot_duration_minutes=30,
        )
        for day in range(5)
    ]
    db.add_all(entries)
    db.commit()
    return entries


# ------------------ client ------------------
@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(business):
    return {"Authorization": f"Bearer {create_access_token(business.id)}"}


def customer_payload(**overrides):
    payload = {
        "first_name": "Ana",
        "last_name": "Silva",
        "phone": "+351 912 345 678",
        "email": "ana@test.com",
    }
    payload.update(overrides)
    return payload


def make_appointment(db, business, service, start, status=None, customer=None, duration=None):
    """Insert an appointment directly, bypassing the booking path"""
    from datetime import timedelta

    from app.models import Appointment, AppointmentStatus, Customer
    from app.services.appointment.cancellation_tokens import CancellationTokenManager

    if customer is None:
        customer = Customer(
            business_id=business.id,
            first_name="Walk",
            last_name="In",
            phone=f"+1555{start.strftime('%m%d%H%M')}",
            email="walkin@test.com",
        )
        db.add(customer)

    duration = duration or service.duration_minutes
    token, expires_at = CancellationTokenManager.issue(start + timedelta(minutes=duration))
    appointment = Appointment(
        business_id=business.id,
        service_id=service.id,
        customer=customer,
        appointment_datetime=start,
        duration_minutes=duration,
        service_name=service.name,
        price=service.price,
        status=status or AppointmentStatus.CONFIRMED,
        cancellation_token=token,
        cancellation_token_expires_at=expires_at,
    )
    db.add(appointment)
    db.commit()
    return appointment
