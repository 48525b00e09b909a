"""
Transactional email over SMTP.

Booking confirmations, cancellations and provider notices are rendered from
Jinja2 templates in ``backend/templates/emails`` and sent with smtplib. Every
send method returns True on success and False otherwise; callers run them as
best-effort side effects.
"""

import logging
import smtplib
import ssl
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import (
    BUSINESS_EMAIL, EMAIL_FROM_ADDRESS, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT,
    SMTP_USE_TLS, SMTP_USERNAME
)
from core.constants import CANCELLATION_CUTOFF_HOURS
from models import Booking, Slot

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates"


class EmailService:
    """SMTP email sender for booking notifications."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        username: str = SMTP_USERNAME,
        password: str = SMTP_PASSWORD,
        use_tls: bool = SMTP_USE_TLS,
        from_address: str = EMAIL_FROM_ADDRESS,
        business_email: str = BUSINESS_EMAIL,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.business_email = business_email
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(['html', 'xml'])
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(f"emails/{template_name}").render(**context)

    def send(
        self,
        to: str,
        subject: str,
        html_content: str,
        attachments: Optional[List[Dict[str, Any]]] = None,
    ) -> bool:
        """
        Send one HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html_content: HTML body
            attachments: Optional list of {"filename": str, "content": bytes}

        Returns:
            True if the SMTP server accepted the message, False otherwise
        """
        if not to:
            logger.warning(f"No recipient for email '{subject}', skipping")
            return False
        if not self.is_configured:
            logger.warning(f"SMTP is not configured, skipping email '{subject}' to {to}")
            return False

        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(html_content, "html"))

        for attachment in attachments or []:
            part = MIMEBase("application", "octet-stream")
            part.set_payload(attachment["content"])
            encoders.encode_base64(part)
            part.add_header(
                "Content-Disposition", f'attachment; filename="{attachment["filename"]}"'
            )
            msg.attach(part)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                if self.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Failed to send email '{subject}' to {to}: {e}")
            return False

        logger.info(f"Email '{subject}' sent to {to}")
        return True

    @staticmethod
    def _ticket_attachment(booking: Booking, ticket_pdf: Optional[bytes]) -> List[Dict[str, Any]]:
        if not ticket_pdf:
            return []
        return [{"filename": f"{booking.booking_number}.pdf", "content": ticket_pdf}]

    def send_booking_confirmation(
        self, booking: Booking, slot: Optional[Slot] = None, ticket_pdf: Optional[bytes] = None
    ) -> bool:
        """Send the booking confirmation (with the PDF ticket when available) to the customer."""
        html = self.render(
            "booking_confirmation.html",
            booking=booking, slot=slot, cutoff_hours=CANCELLATION_CUTOFF_HOURS
        )
        return self.send(
            booking.customer_email,
            f"Booking Confirmation - Ticket #{booking.booking_number}",
            html,
            self._ticket_attachment(booking, ticket_pdf),
        )

    def send_booking_cancellation(self, booking: Booking, slot: Optional[Slot] = None) -> bool:
        """Tell the customer their booking was cancelled."""
        html = self.render("booking_cancellation.html", booking=booking, slot=slot)
        return self.send(
            booking.customer_email,
            f"Booking Cancelled - Ticket #{booking.booking_number}",
            html,
        )

    def provider_recipient(self, slot: Slot) -> str:
        """Provider notice address: the slot's contact email, else the configured business inbox."""
        return slot.provider_contact_email or self.business_email

    def send_provider_new_booking(
        self, booking: Booking, slot: Slot, ticket_pdf: Optional[bytes] = None
    ) -> bool:
        """Notify the provider about a new booking."""
        html = self.render("provider_new_booking.html", booking=booking, slot=slot)
        return self.send(
            self.provider_recipient(slot),
            f"New Booking Received - {booking.booking_number}",
            html,
            self._ticket_attachment(booking, ticket_pdf),
        )

    def send_provider_cancellation(self, booking: Booking, slot: Slot) -> bool:
        """Notify the provider that the patient cancelled."""
        html = self.render("provider_cancellation.html", booking=booking, slot=slot)
        return self.send(
            self.provider_recipient(slot),
            f"Patient Cancelled - Ticket #{booking.booking_number}",
            html,
        )


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the shared email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
