"""
PDF generation service for booking tickets using WeasyPrint.

Tickets are rendered from the immutable ticket record through a Jinja2 HTML
template, so the printed ticket always matches the stored one.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models import Ticket

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates"


def ticket_context(ticket: Ticket) -> Dict[str, Any]:
    """Template variables for a ticket."""
    return {
        "booking_number": ticket.booking_number,
        "doctor_name": ticket.doctor_name,
        "doctor_location": ticket.doctor_location,
        "doctor_contact": ticket.doctor_contact,
        "customer_name": ticket.customer_name,
        "customer_email": ticket.customer_email,
        "customer_phone": ticket.customer_phone,
        "customer_age": ticket.customer_age,
        "customer_gender": ticket.customer_gender,
        "department": ticket.department,
        "date": ticket.date,
        "time": ticket.time,
        "price": ticket.price,
    }


class PDFService:
    """
    Service for generating PDF tickets.

    Uses WeasyPrint to convert the HTML ticket template to PDF.
    """

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        """Initialize PDF service with template loader."""
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(['html', 'xml'])
        )

        def format_currency(value: float) -> str:
            """Format a price with comma separators (e.g., 2500 -> '2,500')."""
            return f"{round(value or 0):,}"

        self.env.filters['format_currency'] = format_currency
        self.base_dir = template_dir

    def render_ticket_html(self, ticket: Ticket) -> str:
        """Render the ticket template to an HTML string."""
        template = self.env.get_template('tickets/ticket.html')
        return template.render(ticket=ticket_context(ticket))

    def generate_ticket_pdf(self, ticket: Ticket) -> bytes:
        """
        Generate the PDF ticket.

        Args:
            ticket: Stored ticket record

        Returns:
            PDF file content as bytes

        Raises:
            Exception: If PDF generation fails
        """
        # WeasyPrint loads native libraries (Pango) on import
        from weasyprint import HTML  # type: ignore

        html_content = self.render_ticket_html(ticket)
        pdf_bytes = HTML(string=html_content, base_url=str(self.base_dir)).write_pdf()
        logger.info(f"Generated PDF ticket {ticket.booking_number} ({len(pdf_bytes)} bytes)")
        return pdf_bytes


_pdf_service: PDFService | None = None


def get_pdf_service() -> PDFService:
    """Get the shared PDF service instance."""
    global _pdf_service
    if _pdf_service is None:
        _pdf_service = PDFService()
    return _pdf_service
