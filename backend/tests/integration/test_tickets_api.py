"""
Integration tests for the ticket endpoints.
"""

from tests.conftest import create_admin, create_provider_with_profile, create_slot, create_user
from tests.utils import auth_headers


def book(client, db_session):
    provider, _ = create_provider_with_profile(db_session)
    slot = create_slot(db_session, provider)
    response = client.post(f"/api/slots/book/{slot.id}", json={
        "customerName": "Jane Doe",
        "customerEmail": "jane@example.com",
        "customerPhone": "+15550123",
        "customerAge": 34,
        "customerGender": "Female",
    })
    return provider, response.json()["booking"]["bookingNumber"]


class TestGetTicket:

    def test_guest_with_email(self, client, db_session):
        _, number = book(client, db_session)

        response = client.get(f"/api/tickets/{number}", params={"email": "jane@example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["bookingNumber"] == number
        assert data["customerName"] == "Jane Doe"
        assert data["doctorContact"] == "clinic@example.com"
        assert data["price"] == 500.0

    def test_lowercase_number(self, client, db_session):
        _, number = book(client, db_session)
        response = client.get(f"/api/tickets/{number.lower()}", params={"email": "jane@example.com"})
        assert response.status_code == 200

    def test_guest_without_email(self, client, db_session):
        _, number = book(client, db_session)
        assert client.get(f"/api/tickets/{number}").status_code == 404

    def test_owning_provider_and_admin(self, client, db_session):
        provider, number = book(client, db_session)
        admin = create_admin(db_session)
        stranger = create_user(db_session, email="x@example.com")

        assert client.get(f"/api/tickets/{number}", headers=auth_headers(provider)).status_code == 200
        assert client.get(f"/api/tickets/{number}", headers=auth_headers(admin)).status_code == 200
        assert client.get(f"/api/tickets/{number}", headers=auth_headers(stranger)).status_code == 404

    def test_unknown_number(self, client):
        response = client.get("/api/tickets/ZARVO-FFFFFFFF", params={"email": "jane@example.com"})
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"


class TestTicketPdf:

    def test_pdf_download(self, client, db_session, fake_pdf):
        _, number = book(client, db_session)

        response = client.get(f"/api/tickets/{number}/pdf", params={"email": "jane@example.com"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == f'inline; filename="{number}.pdf"'
        assert response.content == b"%PDF-1.7 fake ticket"

    def test_pdf_requires_access(self, client, db_session, fake_pdf):
        _, number = book(client, db_session)
        rendered_before = len(fake_pdf.rendered)

        response = client.get(f"/api/tickets/{number}/pdf", params={"email": "x@example.com"})

        assert response.status_code == 404
        assert len(fake_pdf.rendered) == rendered_before
