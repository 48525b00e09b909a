# pyright: reportMissingTypeStubs=false
"""
Ticket API endpoints.

Tickets are looked up by booking number. Guests identify themselves with the
``email`` query parameter; authenticated admins and the owning provider need
none.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from api.dependencies import get_pdf_service
from api.responses import TicketResponse, ticket_to_response
from auth.dependencies import UserContext, get_optional_user
from core.database import get_db
from core.errors import NotFoundError
from services.booking_service import BookingService
from services.pdf_service import PDFService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{booking_number}", summary="Get a ticket")
async def get_ticket(
    booking_number: str,
    email: Optional[str] = Query(None, description="Customer email used to book"),
    current_user: Optional[UserContext] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> TicketResponse:
    """Get the ticket of a booking."""
    ticket = BookingService.get_ticket_by_number(db, booking_number, current_user, email)
    return ticket_to_response(ticket)


@router.get("/{booking_number}/pdf", summary="Download a ticket as PDF")
def get_ticket_pdf(
    booking_number: str,
    email: Optional[str] = Query(None, description="Customer email used to book"),
    current_user: Optional[UserContext] = Depends(get_optional_user),
    db: Session = Depends(get_db),
    pdf_service: Optional[PDFService] = Depends(get_pdf_service)
) -> Response:
    """Render the ticket to PDF."""
    ticket = BookingService.get_ticket_by_number(db, booking_number, current_user, email)
    if pdf_service is None:
        raise NotFoundError("PDF tickets are not available")

    pdf_bytes = pdf_service.generate_ticket_pdf(ticket)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{ticket.booking_number}.pdf"'},
    )
