"""
Integration tests for the booking endpoints.
"""

from models import Booking, Slot, Ticket
from tests.conftest import (
    create_admin, create_booking, create_provider_with_profile, create_slot, create_user
)
from tests.utils import auth_headers


def book(client, slot_id, email="jane@example.com"):
    response = client.post(f"/api/slots/book/{slot_id}", json={
        "customerName": "Jane Doe",
        "customerEmail": email,
        "customerPhone": "+15550123",
        "customerAge": 34,
        "customerGender": "Female",
    })
    assert response.status_code == 201
    return response.json()


class TestCancelBooking:

    def test_customer_cancels(self, client, db_session, fake_email):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        claimed = book(client, slot.id)
        customer = create_user(db_session, email="jane@example.com")

        response = client.post(f"/api/bookings/{claimed['booking']['id']}/cancel", headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["message"] == "Booking cancelled"
        assert data["alreadyCancelled"] is False
        assert data["booking"]["cancelledAt"] is not None
        assert fake_email.kinds()[-2:] == ["cancellation", "provider_cancellation"]

        # The slot is bookable again
        assert [s["id"] for s in client.get("/api/slots").json()] == [slot.id]

    def test_repeat_cancel_is_idempotent(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        claimed = book(client, slot.id)
        customer = create_user(db_session, email="jane@example.com")
        url = f"/api/bookings/{claimed['booking']['id']}/cancel"

        client.post(url, headers=auth_headers(customer))
        response = client.post(url, headers=auth_headers(customer))

        assert response.status_code == 200
        assert response.json()["alreadyCancelled"] is True
        assert response.json()["message"] == "Booking was already cancelled"

    def test_too_late(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider, date="2020-01-01")
        booking = create_booking(db_session, slot, customer_email="jane@example.com")
        customer = create_user(db_session, email="jane@example.com")

        response = client.post(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(customer))

        assert response.status_code == 400
        assert response.json()["type"] == "too_late"
        assert db_session.get(Booking, booking.id).status == "booked"

    def test_other_customer_is_forbidden(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        booking = create_booking(db_session, slot, customer_email="jane@example.com")
        stranger = create_user(db_session, email="mallory@example.com")

        response = client.post(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(stranger))

        assert response.status_code == 403
        assert response.json()["type"] == "forbidden"

    def test_requires_authentication(self, client, db_session):
        assert client.post("/api/bookings/1/cancel").status_code == 401

    def test_unknown_booking(self, client, db_session):
        customer = create_user(db_session)
        response = client.post("/api/bookings/4242/cancel", headers=auth_headers(customer))
        assert response.status_code == 404


class TestCancelPublic:

    def test_guest_cancel(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        claimed = book(client, slot.id)

        response = client.post("/api/bookings/cancel-public", json={
            "bookingNumber": claimed["booking"]["bookingNumber"],
            "customerEmail": "JANE@example.com",
        })

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert db_session.get(Slot, slot.id).is_booked is False

    def test_wrong_email(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        claimed = book(client, slot.id)

        response = client.post("/api/bookings/cancel-public", json={
            "bookingNumber": claimed["booking"]["bookingNumber"],
            "customerEmail": "other@example.com",
        })

        assert response.status_code == 403

    def test_unknown_number(self, client):
        response = client.post("/api/bookings/cancel-public", json={
            "bookingNumber": "ZARVO-00000000",
            "customerEmail": "jane@example.com",
        })
        assert response.status_code == 404

    def test_rate_limited(self, client, monkeypatch):
        from utils.rate_limiter import public_cancel_limiter
        monkeypatch.setattr(public_cancel_limiter, "max_requests", 1)
        body = {"bookingNumber": "ZARVO-00000000", "customerEmail": "jane@example.com"}

        assert client.post("/api/bookings/cancel-public", json=body).status_code == 404
        assert client.post("/api/bookings/cancel-public", json=body).status_code == 429


class TestListings:

    def test_admin_lists_all(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        book(client, create_slot(db_session, provider).id)
        book(client, create_slot(db_session, provider, time="12:00").id, email="bob@example.com")
        admin = create_admin(db_session)

        response = client.get("/api/bookings", headers=auth_headers(admin))

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_non_admin_cannot_list_all(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        assert client.get("/api/bookings", headers=auth_headers(provider)).status_code == 403

    def test_provider_bookings(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        other, _ = create_provider_with_profile(db_session, email="other@example.com")
        mine = book(client, create_slot(db_session, provider).id)
        book(client, create_slot(db_session, other).id, email="bob@example.com")

        response = client.get("/api/bookings/my-bookings", headers=auth_headers(provider))

        assert [b["id"] for b in response.json()] == [mine["booking"]["id"]]

    def test_customer_bookings(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        mine = book(client, create_slot(db_session, provider).id)
        book(client, create_slot(db_session, provider, time="12:00").id, email="bob@example.com")
        customer = create_user(db_session, email="jane@example.com")

        response = client.get("/api/bookings/mine", headers=auth_headers(customer))

        assert [b["bookingNumber"] for b in response.json()] == [mine["booking"]["bookingNumber"]]

    def test_get_booking(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        claimed = book(client, create_slot(db_session, provider).id)
        booking_id = claimed["booking"]["id"]
        customer = create_user(db_session, email="jane@example.com")
        stranger = create_user(db_session, email="x@example.com")

        assert client.get(f"/api/bookings/{booking_id}", headers=auth_headers(customer)).status_code == 200
        assert client.get(f"/api/bookings/{booking_id}", headers=auth_headers(provider)).status_code == 200
        assert client.get(f"/api/bookings/{booking_id}", headers=auth_headers(stranger)).status_code == 403


class TestDeleteBooking:

    def test_admin_deletes_booking(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        slot = create_slot(db_session, provider)
        claimed = book(client, slot.id)
        admin = create_admin(db_session)

        response = client.delete(f"/api/bookings/{claimed['booking']['id']}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "warnings": []}
        db_session.expire_all()
        assert db_session.get(Booking, claimed["booking"]["id"]) is None
        assert db_session.get(Slot, slot.id).is_booked is False
        ticket = db_session.get(Ticket, claimed["ticket"]["id"])
        assert ticket is not None and ticket.booking_id is None

    def test_customer_cannot_delete(self, client, db_session):
        provider, _ = create_provider_with_profile(db_session)
        claimed = book(client, create_slot(db_session, provider).id)
        customer = create_user(db_session, email="jane@example.com")

        response = client.delete(f"/api/bookings/{claimed['booking']['id']}", headers=auth_headers(customer))

        assert response.status_code == 403
