"""
Integration tests for the slot endpoints.
"""

from sqlalchemy import select

from core.constants import APPROVAL_PENDING, ROLE_DOCTOR
from models import Booking, Slot
from tests.conftest import (
    create_admin, create_booking, create_provider_with_profile, create_slot, create_user, future_date
)
from tests.utils import auth_headers


CLAIM_BODY = {
    "customerName": "Jane Doe",
    "customerEmail": "jane@example.com",
    "customerPhone": "+15550123",
    "customerAge": 34,
    "customerGender": "Female",
}


def slot_body(**overrides):
    body = {
        "date": future_date(),
        "time": "10:30",
        "duration": 30,
        "price": 750,
        "department": "Dermatology",
        "doctor": {"name": "Dr. Skin", "location": "Elm Street", "contactEmail": "desk@example.com"},
    }
    body.update(overrides)
    return body


class TestListSlots:

    def test_public_listing_is_camel_case(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.get("/api/slots")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["id"] == slot.id
        assert data[0]["isBooked"] is False
        assert data[0]["businessId"] == provider.id
        assert data[0]["doctor"]["name"] == "Dr. Test"
        assert data[0]["doctor"]["contactEmail"] == "clinic@example.com"

    def test_pending_provider_is_hidden(self, client, db_session):
        pending, _ = create_provider_with_profile(db_session, approval_status=APPROVAL_PENDING)
        create_slot(db_session, pending)

        assert client.get("/api/slots").json() == []

    def test_my_slots(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        create_slot(db_session, provider)
        create_slot(db_session, provider, time="11:00", is_booked=True)

        response = client.get("/api/slots/my-slots", headers=auth_headers(provider))

        assert response.status_code == 200
        assert [s["isBooked"] for s in response.json()] == [False, True]

    def test_my_slots_requires_provider(self, client, db_session):
        customer = create_user(db_session)
        assert client.get("/api/slots/my-slots", headers=auth_headers(customer)).status_code == 403
        assert client.get("/api/slots/my-slots").status_code == 401


class TestCreateSlot:

    def test_approved_provider_creates_slot(self, client, db_session, event_recorder):
        provider, _ = create_provider_with_profile(db_session, role=ROLE_DOCTOR, with_profile=False)

        response = client.post("/api/slots", json=slot_body(), headers=auth_headers(provider))

        assert response.status_code == 201
        data = response.json()
        assert data["department"] == "Dermatology"
        assert data["doctor"]["location"] == "Elm Street"
        assert data["doctor"]["contactEmail"] == "desk@example.com"
        assert event_recorder.topics() == ["slotCreated"]
        assert [s["id"] for s in client.get("/api/slots").json()] == [data["id"]]

    def test_pending_provider_is_refused(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session, approval_status=APPROVAL_PENDING)

        response = client.post("/api/slots", json=slot_body(), headers=auth_headers(provider))

        assert response.status_code == 403
        assert db_session.scalars(select(Slot)).first() is None

    def test_customer_is_refused(self, client, db_session):
        customer = create_user(db_session)
        response = client.post("/api/slots", json=slot_body(), headers=auth_headers(customer))
        assert response.status_code == 403

    def test_invalid_time(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)

        response = client.post("/api/slots", json=slot_body(time="half past ten"), headers=auth_headers(provider))

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"


class TestBookSlot:

    def test_guest_books_slot(self, client, db_session, event_recorder, fake_email):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.post(f"/api/slots/book/{slot.id}", json=CLAIM_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["booking"]["bookingNumber"].startswith("ZARVO-")
        assert data["booking"]["status"] == "booked"
        assert data["booking"]["fee"] == 500.0
        assert data["booking"]["doctor"]["rating"] == 4.5
        assert data["ticket"]["bookingNumber"] == data["booking"]["bookingNumber"]
        assert data["ticket"]["customerGender"] == "Female"
        assert data["warnings"] == []
        assert "bookingCreated" in event_recorder.topics()
        assert fake_email.kinds() == ["confirmation", "provider_new_booking"]

        assert client.get("/api/slots").json() == []

    def test_second_booking_conflicts(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        client.post(f"/api/slots/book/{slot.id}", json=CLAIM_BODY)

        response = client.post(f"/api/slots/book/{slot.id}", json={**CLAIM_BODY, "customerEmail": "b@example.com"})

        assert response.status_code == 409
        assert response.json() == {"detail": "Slot already booked", "type": "already_booked"}
        assert len(db_session.scalars(select(Booking)).all()) == 1

    def test_unknown_slot(self, client):
        response = client.post("/api/slots/book/999", json=CLAIM_BODY)
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"

    def test_missing_fields(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.post(f"/api/slots/book/{slot.id}", json={"customerName": "Jane"})

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_invalid_gender(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.post(f"/api/slots/book/{slot.id}", json={**CLAIM_BODY, "customerGender": "robot"})

        assert response.status_code == 400

    def test_email_failure_is_reported_as_warning(self, client, db_session, fake_email):
        fake_email.error = RuntimeError("smtp down")
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.post(f"/api/slots/book/{slot.id}", json=CLAIM_BODY)

        assert response.status_code == 201
        assert "Confirmation email could not be sent" in response.json()["warnings"]

    def test_booking_is_rate_limited(self, client, db_session, monkeypatch):
        from utils.rate_limiter import booking_limiter
        monkeypatch.setattr(booking_limiter, "max_requests", 2)

        assert client.post("/api/slots/book/999", json=CLAIM_BODY).status_code == 404
        assert client.post("/api/slots/book/999", json=CLAIM_BODY).status_code == 404
        response = client.post("/api/slots/book/999", json=CLAIM_BODY)

        assert response.status_code == 429
        assert "Retry-After" in response.headers


class TestDeleteSlot:

    def test_delete_unbooked(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)

        response = client.delete(f"/api/slots/{slot.id}", headers=auth_headers(provider))

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "forced": False, "cancelledBookingId": None, "warnings": []}

    def test_booked_slot_requires_force(self, client, db_session, fake_email):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        booking = create_booking(db_session, slot)

        response = client.delete(f"/api/slots/{slot.id}", headers=auth_headers(provider))
        assert response.status_code == 409
        assert response.json()["type"] == "conflict"

        response = client.delete(f"/api/slots/{slot.id}?force=true", headers=auth_headers(provider))
        assert response.status_code == 200
        assert response.json()["forced"] is True
        assert response.json()["cancelledBookingId"] == booking.id
        assert fake_email.kinds() == ["cancellation"]

    def test_other_provider_gets_404(self, client, db_session):
        owner, _ = create_provider_with_profile(db_session)
        other, _ = create_provider_with_profile(db_session, email="other@example.com")
        slot = create_slot(db_session, owner)

        response = client.delete(f"/api/slots/{slot.id}", headers=auth_headers(other))

        assert response.status_code == 404

    def test_admin_deletes_any_slot(self, client, db_session):
        owner, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, owner)
        admin = create_admin(db_session)

        assert client.delete(f"/api/slots/{slot.id}", headers=auth_headers(admin)).status_code == 200
