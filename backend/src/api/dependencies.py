"""
Service wiring for API endpoints.

Services get their collaborators (event publisher, email, PDF) here, once per
request. Tests replace ``get_event_publisher``, ``get_email_service`` and
``get_pdf_service`` through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, Request

from services.admin_service import AdminService
from services.booking_service import BookingService
from services.email_service import EmailService
from services.email_service import get_email_service as get_shared_email_service
from services.event_publisher import EventPublisher, NullEventPublisher
from services.pdf_service import PDFService
from services.pdf_service import get_pdf_service as get_shared_pdf_service
from services.rating_service import RatingService
from services.slot_service import SlotService


def get_event_publisher(request: Request) -> EventPublisher:
    """The application's event hub, or a publisher that drops events when none is set up."""
    hub = getattr(request.app.state, "event_hub", None)
    return hub if hub is not None else NullEventPublisher()


def get_email_service() -> EmailService:
    return get_shared_email_service()


def get_pdf_service() -> Optional[PDFService]:
    return get_shared_pdf_service()


def get_slot_service(
    publisher: EventPublisher = Depends(get_event_publisher),
    email_service: EmailService = Depends(get_email_service)
) -> SlotService:
    return SlotService(publisher, email_service)


def get_booking_service(
    publisher: EventPublisher = Depends(get_event_publisher),
    email_service: EmailService = Depends(get_email_service),
    pdf_service: Optional[PDFService] = Depends(get_pdf_service)
) -> BookingService:
    return BookingService(publisher, email_service, pdf_service)


def get_rating_service(publisher: EventPublisher = Depends(get_event_publisher)) -> RatingService:
    return RatingService(publisher)


def get_admin_service(publisher: EventPublisher = Depends(get_event_publisher)) -> AdminService:
    return AdminService(publisher)
