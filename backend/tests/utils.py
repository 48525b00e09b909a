"""
Test utilities for the booking backend tests.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from core.config import JWT_SECRET_KEY


def create_jwt_token(user_id: int, email: str, role: str, name: str = "Test User") -> str:
    """Create a JWT access token for a user."""
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "name": name,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "iat": datetime.now(timezone.utc)
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm="HS256")


def auth_headers(user) -> Dict[str, str]:
    """Authorization header for a User row."""
    return {"Authorization": f"Bearer {create_jwt_token(user.id, user.email, user.role, user.name)}"}


class RecordingEventPublisher:
    """Event publisher that keeps every published event in memory."""

    def __init__(self, fail: bool = False):
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.fail = fail

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("event feed unavailable")
        self.events.append((topic, payload))

    def topics(self) -> List[str]:
        return [topic for topic, _ in self.events]


class FakeEmailService:
    """
    Email service double.

    ``result`` is returned from every send; set ``error`` to make sends raise.
    """

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.sent: List[Dict[str, Any]] = []

    def _record(self, kind: str, booking, attachment: Optional[bytes] = None) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append({
            "kind": kind,
            "booking_number": booking.booking_number,
            "to": booking.customer_email,
            "attachment": attachment,
        })
        return self.result

    def send_booking_confirmation(self, booking, slot=None, ticket_pdf=None) -> bool:
        return self._record("confirmation", booking, ticket_pdf)

    def send_booking_cancellation(self, booking, slot=None) -> bool:
        return self._record("cancellation", booking)

    def send_provider_new_booking(self, booking, slot, ticket_pdf=None) -> bool:
        return self._record("provider_new_booking", booking, ticket_pdf)

    def send_provider_cancellation(self, booking, slot) -> bool:
        return self._record("provider_cancellation", booking)

    def kinds(self) -> List[str]:
        return [message["kind"] for message in self.sent]


class FakePDFService:
    """PDF service double returning a fixed document, or raising ``error``."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.rendered: List[str] = []

    def generate_ticket_pdf(self, ticket) -> bytes:
        if self.error is not None:
            raise self.error
        self.rendered.append(ticket.booking_number)
        return b"%PDF-1.7 fake ticket"
