from datetime import timedelta

from app.api.dependencies import create_access_token
from app.models import AppointmentStatus
from tests.conftest import NOW, customer_payload, make_appointment

PUBLIC = "/api/v1/public"
DASHBOARD = "/api/v1/dashboard"


def book(client, service, when="2025-12-02T10:00:00", **customer):
    return client.post(f"{PUBLIC}/businesses/test-salon/appointments", json={
        "service_id": str(service.id),
        "appointment_datetime": when,
        "customer": customer_payload(**customer),
    })


# ------------------ public ------------------
def test_availability_lists_slots(client, service, weekly_hours):
    response = client.get(
        f"{PUBLIC}/businesses/test-salon/availability",
        params={"service_id": str(service.id), "date": "2025-12-02"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["slot_duration_minutes"] == 30
    assert len(data["slots"]) == 6
    assert data["slots"][0] == {"start": "2025-12-02T09:00:00", "end": "2025-12-02T09:30:00", "available": True}


def test_booked_slot_shows_as_taken(client, service, weekly_hours):
    assert book(client, service).status_code == 201

    slots = client.get(
        f"{PUBLIC}/businesses/test-salon/availability",
        params={"service_id": str(service.id), "date": "2025-12-02"},
    ).json()["slots"]

    assert [s["start"][11:16] for s in slots if not s["available"]] == ["10:00"]


def test_unknown_business_is_404(client, service):
    response = client.get(
        f"{PUBLIC}/businesses/nope/availability",
        params={"service_id": str(service.id), "date": "2025-12-02"},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "detail": "Business not found"}


def test_booking_returns_token(client, service, weekly_hours):
    response = book(client, service)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["service"]["name"] == "Haircut"
    assert len(data["cancellation_token"]) >= 43


def test_double_booking_is_409(client, service, weekly_hours):
    book(client, service)
    response = book(client, service, phone="+351 900 111 222", email="other@test.com")

    assert response.status_code == 409
    assert response.json()["error"] == "slot_unavailable"


def test_booking_in_the_past_is_422(client, service, weekly_hours):
    response = book(client, service, when="2025-11-28T10:00:00")

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_malformed_booking_is_422(client, service, weekly_hours):
    response = book(client, service, phone="call me maybe")
    assert response.status_code == 422


def test_token_lookup_and_cancel(client, service, weekly_hours):
    token = book(client, service).json()["cancellation_token"]

    lookup = client.get(f"{PUBLIC}/appointments/{token}")
    assert lookup.status_code == 200
    assert "cancellation_token" not in lookup.json()

    cancel = client.post(f"{PUBLIC}/appointments/{token}/cancel", json={"reason": "Schedule clash"})
    assert cancel.status_code == 200
    assert cancel.json()["appointment"]["status"] == "CANCELLED"

    assert client.get(f"{PUBLIC}/appointments/{token}").status_code == 404

    again = client.post(f"{PUBLIC}/appointments/{token}/cancel", json={"reason": "Schedule clash"})
    assert again.status_code == 409
    assert again.json()["error"] == "already_cancelled"


def test_cancel_needs_a_reason(client, service, weekly_hours):
    token = book(client, service).json()["cancellation_token"]

    response = client.post(f"{PUBLIC}/appointments/{token}/cancel", json={"reason": "no"})
    assert response.status_code == 422


def test_public_holidays(client, business, auth_headers):
    client.post(f"{DASHBOARD}/holidays", json={"start_date": "2025-12-24", "end_date": "2025-12-26"},
                headers=auth_headers)

    response = client.get(f"{PUBLIC}/businesses/test-salon/holidays")
    assert [h["start_date"] for h in response.json()["holidays"]] == ["2025-12-24"]


# ------------------ dashboard ------------------
def test_dashboard_requires_a_token(client, business):
    assert client.get(f"{DASHBOARD}/appointments").status_code in (401, 403)

    bad = client.get(f"{DASHBOARD}/appointments", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401


def test_business_confirms_and_lists(client, service, weekly_hours, auth_headers):
    appointment_id = book(client, service).json()["id"]

    response = client.patch(
        f"{DASHBOARD}/appointments/{appointment_id}/status",
        json={"status": "CONFIRMED"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"

    listing = client.get(
        f"{DASHBOARD}/appointments", params={"status": "CONFIRMED"}, headers=auth_headers
    ).json()
    assert listing["total_appointments"] == 1
    assert listing["appointments"][0]["id"] == appointment_id


def test_invalid_transition_is_409(client, db, business, service, auth_headers):
    appointment = make_appointment(db, business, service, NOW + timedelta(days=1))

    response = client.patch(
        f"{DASHBOARD}/appointments/{appointment.id}/status",
        json={"status": "NO_SHOW"},
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


def test_other_business_cannot_see_appointment(client, db, business, service):
    from app.models import Business

    other = Business(name="Other", slug="other")
    db.add(other)
    db.commit()
    appointment = make_appointment(db, business, service, NOW + timedelta(days=1))

    response = client.get(
        f"{DASHBOARD}/appointments/{appointment.id}",
        headers={"Authorization": f"Bearer {create_access_token(other.id)}"},
    )
    assert response.status_code == 404


def test_holiday_create_cascades(client, db, business, service, auth_headers):
    from datetime import datetime

    appointment = make_appointment(db, business, service, datetime(2025, 12, 25, 10, 0))

    preview = client.get(
        f"{DASHBOARD}/holidays/preview",
        params={"start_date": "2025-12-24", "end_date": "2025-12-26"},
        headers=auth_headers,
    ).json()
    assert preview == {"affected_appointments": [str(appointment.id)], "count": 1}

    response = client.post(
        f"{DASHBOARD}/holidays",
        json={"start_date": "2025-12-24", "end_date": "2025-12-26", "reason": "Christmas"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["cancelled_appointments"] == [str(appointment.id)]

    detail = client.get(f"{DASHBOARD}/appointments/{appointment.id}", headers=auth_headers).json()
    assert detail["status"] == AppointmentStatus.CANCELLED.value
    assert detail["cancelled_by"] == "SYSTEM"


def test_schedule_management(client, business, auth_headers):
    response = client.put(
        f"{DASHBOARD}/schedule/weekly",
        json={"day_of_week": 0, "start_time": "10:00", "end_time": "14:00", "slot_duration_minutes": 60},
        headers=auth_headers,
    )
    assert response.status_code == 200

    bad = client.put(
        f"{DASHBOARD}/schedule/weekly",
        json={"day_of_week": 1, "start_time": "14:00", "end_time": "10:00"},
        headers=auth_headers,
    )
    assert bad.status_code == 422

    client.put(
        f"{DASHBOARD}/schedule/exceptions",
        json={"exception_date": "2025-12-08", "is_closed": True, "reason": "Staff training"},
        headers=auth_headers,
    )

    days = client.get(
        f"{DASHBOARD}/schedule/open-intervals",
        params={"start_date": "2025-12-01", "end_date": "2025-12-08"},
        headers=auth_headers,
    ).json()["days"]

    assert len(days) == 8
    assert days[0]["intervals"] == [{"start": "2025-12-01T10:00:00", "end": "2025-12-01T14:00:00"}]
    assert days[0]["slot_duration_minutes"] == 60
    assert days[1]["is_closed"]
    assert days[7]["is_closed"]


def test_health(client):
    assert client.get("/health/").json()["status"] == "healthy"


def test_demo_business_script_creates_a_bookable_business(client, db):
    from app.scripts.create_business import create_demo_business

    business = create_demo_business(db, "demo-salon")
    assert create_demo_business(db, "demo-salon").id == business.id

    haircut = next(s for s in business.services if s.name == "Haircut")
    response = client.get(
        f"{PUBLIC}/businesses/demo-salon/availability",
        params={"service_id": str(haircut.id), "date": "2025-12-02"},
    )
    assert len(response.json()["slots"]) == 16
