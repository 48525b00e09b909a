"""
Booking service for the booking lifecycle.

Claiming a slot, creating its booking and ticket, cancelling (within the
cutoff window), deleting bookings and completing past ones. Emails, PDF
generation and event publishes run after the primary write has committed and
never change its outcome: a failure there becomes a warning on the result.
"""

import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import (
    BOOKING_NUMBER_MAX_ATTEMPTS, BOOKING_NUMBER_PREFIX, BOOKING_NUMBER_RANDOM_BYTES,
    BOOKING_STATUS_BOOKED, BOOKING_STATUS_CANCELLED, BOOKING_STATUS_COMPLETED,
    CANCELLATION_CUTOFF_HOURS, CUSTOMER_GENDERS
)
from core.errors import (
    AlreadyBookedError, BookingNumberExhaustedError, BookingValidationError,
    ForbiddenError, InvalidSlotTimeError, NotFoundError, TooLateError
)
from models import Booking, Slot, Ticket
from services.email_service import EmailService
from services.event_publisher import (
    BOOKING_CANCELLED, BOOKING_CREATED, SLOT_UPDATED, TICKET_CREATED, EventPublisher
)
from services.pdf_service import PDFService
from services.slot_service import SlotService
from utils.best_effort import run_best_effort
from utils.datetime_utils import local_now, parse_slot_start, slot_end

if TYPE_CHECKING:
    from auth.dependencies import UserContext

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_booking_number() -> str:
    """Random booking number, e.g. ZARVO-1A2B3C4D."""
    return f"{BOOKING_NUMBER_PREFIX}-{secrets.token_hex(BOOKING_NUMBER_RANDOM_BYTES).upper()}"


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


@dataclass
class CustomerDetails:
    """Customer data submitted with a claim."""

    name: str
    email: str
    phone: str
    age: int
    gender: str

    def normalized(self) -> "CustomerDetails":
        return CustomerDetails(
            name=(self.name or "").strip(),
            email=(self.email or "").strip(),
            phone=(self.phone or "").strip(),
            age=self.age,
            gender=(self.gender or "").strip(),
        )

    def validate(self) -> None:
        """
        Raises:
            BookingValidationError: If any field is missing or malformed
        """
        if not self.name:
            raise BookingValidationError("Customer name is required")
        if not self.email or not EMAIL_PATTERN.match(self.email):
            raise BookingValidationError("A valid customer email is required")
        if not self.phone:
            raise BookingValidationError("Customer phone is required")
        if self.age is None or isinstance(self.age, bool) or not 0 < int(self.age) <= 150:
            raise BookingValidationError("Customer age must be between 1 and 150")
        if self.gender not in CUSTOMER_GENDERS:
            raise BookingValidationError(f"Gender must be one of {', '.join(CUSTOMER_GENDERS)}")


@dataclass
class ClaimResult:
    booking: Booking
    ticket: Optional[Ticket]
    slot: Slot
    warnings: List[str] = field(default_factory=list)


@dataclass
class CancelResult:
    booking: Booking
    already_cancelled: bool = False
    warnings: List[str] = field(default_factory=list)


def booking_event_payload(booking: Booking) -> Dict[str, Any]:
    return {
        "id": booking.id,
        "slotId": booking.slot_id,
        "businessId": booking.business_id,
        "bookingNumber": booking.booking_number,
        "status": booking.status,
    }


class BookingService:
    """
    Service class for booking operations.

    Args:
        publisher: Event feed
        email_service: Customer and provider emails
        pdf_service: PDF ticket generation; when None, emails go out without an attachment
    """

    def __init__(
        self,
        publisher: EventPublisher,
        email_service: EmailService,
        pdf_service: Optional[PDFService] = None,
    ):
        self.publisher = publisher
        self.email_service = email_service
        self.pdf_service = pdf_service

    def _publish(self, topic: str, payload: Dict[str, Any]) -> None:
        run_best_effort(f"publish {topic}", self.publisher.publish, topic, payload)

    # ===== Claim =====

    def claim_slot(self, db: Session, slot_id: int, customer: CustomerDetails) -> ClaimResult:
        """
        Book a slot for a customer.

        The slot flag flip and the booking insert commit together, so a
        booked slot always has a booking. A booking-number collision rolls
        both back and the claim is retried with a fresh number. The ticket is
        written in a second transaction; if that fails the booking stands and
        a warning is returned.

        Args:
            db: Database session
            slot_id: Slot to claim
            customer: Customer details

        Returns:
            ClaimResult with the booking, the ticket (None if it could not be
            written), the claimed slot and any side-effect warnings

        Raises:
            BookingValidationError: Invalid customer details
            NotFoundError: Slot does not exist
            AlreadyBookedError: Slot was (or just got) booked by someone else
            BookingNumberExhaustedError: Every booking number attempt collided
        """
        customer = customer.normalized()
        customer.validate()

        slot = db.get(Slot, slot_id)
        if slot is None:
            raise NotFoundError("Slot not found")
        if slot.is_booked:
            raise AlreadyBookedError()

        booking: Optional[Booking] = None
        for attempt in range(1, BOOKING_NUMBER_MAX_ATTEMPTS + 1):
            if not SlotService.try_claim(db, slot.id):
                db.rollback()
                logger.info(f"Slot {slot_id} was claimed concurrently")
                raise AlreadyBookedError()

            snapshot = slot.doctor_snapshot()
            booking = Booking(
                slot_id=slot.id,
                business_id=slot.business_id,
                customer_name=customer.name,
                customer_email=customer.email,
                customer_phone=customer.phone,
                customer_age=int(customer.age),
                customer_gender=customer.gender,
                doctor_name=snapshot["name"],
                doctor_location=snapshot["location"],
                doctor_rating=snapshot["rating"] or 0.0,
                fee=slot.price,
                booking_number=generate_booking_number(),
                status=BOOKING_STATUS_BOOKED,
            )
            db.add(booking)
            try:
                db.commit()
                break
            except IntegrityError as e:
                db.rollback()
                logger.warning(f"Booking number collision for slot {slot_id} (attempt {attempt}): {e}")
                booking = None
        if booking is None:
            logger.error(f"Could not allocate a booking number for slot {slot_id}")
            raise BookingNumberExhaustedError()

        db.refresh(slot)
        logger.info(f"Slot {slot.id} booked as {booking.booking_number}")

        warnings: List[str] = []
        ticket = self._create_ticket(db, booking, slot)
        if ticket is None:
            warnings.append("Ticket could not be created")

        self._publish(SLOT_UPDATED, {"id": slot.id, "isBooked": True})
        self._publish(BOOKING_CREATED, booking_event_payload(booking))
        if ticket is not None:
            self._publish(TICKET_CREATED, {"id": ticket.id, "bookingNumber": ticket.booking_number})

        ticket_pdf = self._render_ticket_pdf(ticket)
        if ticket is not None and ticket_pdf is None and self.pdf_service is not None:
            warnings.append("PDF ticket could not be generated")

        if not run_best_effort(
            "send booking confirmation",
            self.email_service.send_booking_confirmation, booking, slot, ticket_pdf
        ):
            warnings.append("Confirmation email could not be sent")
        if not run_best_effort(
            "send provider booking notice",
            self.email_service.send_provider_new_booking, booking, slot, ticket_pdf
        ):
            warnings.append("Provider notification email could not be sent")

        return ClaimResult(booking=booking, ticket=ticket, slot=slot, warnings=warnings)

    def _create_ticket(self, db: Session, booking: Booking, slot: Slot) -> Optional[Ticket]:
        ticket = Ticket(
            booking_id=booking.id,
            doctor_name=booking.doctor_name,
            doctor_location=booking.doctor_location,
            doctor_contact=slot.provider_contact_email or "N/A",
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            customer_age=booking.customer_age,
            customer_gender=booking.customer_gender,
            department=slot.department,
            date=slot.date,
            time=slot.time,
            price=booking.fee,
            booking_number=booking.booking_number,
        )
        db.add(ticket)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create ticket for booking {booking.booking_number}: {e}")
            return None
        return ticket

    def _render_ticket_pdf(self, ticket: Optional[Ticket]) -> Optional[bytes]:
        if ticket is None or self.pdf_service is None:
            return None
        try:
            return self.pdf_service.generate_ticket_pdf(ticket)
        except Exception as e:
            logger.warning(f"Failed to generate PDF ticket {ticket.booking_number}: {e}")
            return None

    # ===== Cancellation =====

    def cancel_booking(
        self,
        db: Session,
        booking_id: int,
        principal: Optional["UserContext"] = None,
        now: Optional[datetime] = None,
    ) -> CancelResult:
        """
        Cancel a booking on behalf of its customer.

        Args:
            db: Database session
            booking_id: Booking to cancel
            principal: Authenticated caller; its email must match the booking's
            now: Override of the current time

        Raises:
            NotFoundError: Booking, or its slot, does not exist
            ForbiddenError: Caller's email differs from the booking's
            InvalidSlotTimeError: Slot date/time cannot be parsed
            TooLateError: Less than the cutoff window remains before the slot starts
        """
        booking = db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        requester_email = principal.email if principal is not None else None
        return self._cancel(db, booking, requester_email, now)

    def cancel_booking_by_number(
        self,
        db: Session,
        booking_number: str,
        customer_email: str,
        now: Optional[datetime] = None,
    ) -> CancelResult:
        """
        Guest cancellation: the booking number plus the email it was booked with.

        Same rules as ``cancel_booking``, with the supplied email standing in
        for the authenticated caller.
        """
        if not booking_number or not customer_email:
            raise BookingValidationError("Booking number and email are required")

        booking = db.scalars(
            select(Booking).where(Booking.booking_number == booking_number.strip().upper())
        ).first()
        if booking is None:
            raise NotFoundError("Booking not found")
        return self._cancel(db, booking, customer_email, now)

    def _cancel(
        self,
        db: Session,
        booking: Booking,
        requester_email: Optional[str],
        now: Optional[datetime],
    ) -> CancelResult:
        if requester_email and booking.customer_email and not _same_email(requester_email, booking.customer_email):
            raise ForbiddenError("You can only cancel your own bookings")

        if booking.status == BOOKING_STATUS_CANCELLED:
            logger.info(f"Booking {booking.booking_number} already cancelled")
            return CancelResult(booking=booking, already_cancelled=True)

        slot = db.get(Slot, booking.slot_id) if booking.slot_id is not None else None
        if slot is None:
            raise NotFoundError("Related slot not found")

        try:
            slot_start = parse_slot_start(slot.date, slot.time)
        except ValueError:
            raise InvalidSlotTimeError()

        now = now or local_now()
        if now > slot_start - timedelta(hours=CANCELLATION_CUTOFF_HOURS):
            raise TooLateError(
                f"Cancellation is only allowed up to {CANCELLATION_CUTOFF_HOURS} hours before the appointment"
            )

        booking.status = BOOKING_STATUS_CANCELLED
        booking.cancelled_at = now
        SlotService.release(slot)
        db.commit()
        logger.info(f"Cancelled booking {booking.booking_number}, slot {slot.id} released")

        warnings: List[str] = []
        if not run_best_effort(
            "send cancellation email",
            self.email_service.send_booking_cancellation, booking, slot
        ):
            warnings.append("Cancellation email could not be sent")
        if not run_best_effort(
            "send provider cancellation notice",
            self.email_service.send_provider_cancellation, booking, slot
        ):
            warnings.append("Provider notification email could not be sent")

        self._publish(BOOKING_CANCELLED, {"id": booking.id, "slotId": slot.id})
        self._publish(SLOT_UPDATED, {"id": slot.id, "isBooked": False})
        return CancelResult(booking=booking, warnings=warnings)

    # ===== Deletion =====

    def delete_booking(self, db: Session, booking_id: int, principal: "UserContext") -> List[str]:
        """
        Delete a booking outright (admin, or the provider that owns it).

        Frees the slot only when the booking was still active, and detaches
        the booking's ticket, which is kept as a historical record.

        Returns:
            Side-effect warnings

        Raises:
            NotFoundError: Booking does not exist
            ForbiddenError: Caller neither an admin nor the owning provider
        """
        booking = db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if not principal.is_admin() and booking.business_id != principal.user_id:
            raise ForbiddenError("You can only delete bookings for your own slots")

        slot = db.get(Slot, booking.slot_id) if booking.slot_id is not None else None
        # Only an active booking holds its slot; a cancelled one may have been re-claimed
        was_active = booking.status == BOOKING_STATUS_BOOKED
        released = was_active and slot is not None and SlotService.release(slot)

        db.execute(
            update(Ticket)
            .where(Ticket.booking_id == booking.id)
            .values(booking_id=None)
            .execution_options(synchronize_session=False)
        )
        db.delete(booking)
        db.commit()
        logger.info(f"Deleted booking {booking.booking_number}{' and released slot ' + str(slot.id) if released else ''}")

        warnings: List[str] = []
        if not run_best_effort(
            "send cancellation email",
            self.email_service.send_booking_cancellation, booking, slot
        ):
            warnings.append("Cancellation email could not be sent")

        self._publish(BOOKING_CANCELLED, {"id": booking_id, "slotId": booking.slot_id})
        if released:
            self._publish(SLOT_UPDATED, {"id": slot.id, "isBooked": False})
        return warnings

    # ===== Queries =====

    @staticmethod
    def get_booking(db: Session, booking_id: int, principal: "UserContext") -> Booking:
        """
        Get one booking visible to the caller: admins see all, providers their
        own, customers the ones booked with their email.
        """
        booking = db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if principal.is_admin():
            return booking
        if principal.is_provider() and booking.business_id == principal.user_id:
            return booking
        if _same_email(principal.email, booking.customer_email):
            return booking
        raise ForbiddenError("You are not allowed to view this booking")

    @staticmethod
    def list_bookings(db: Session) -> List[Booking]:
        """All bookings, newest first."""
        return list(db.scalars(select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())))

    @staticmethod
    def list_provider_bookings(db: Session, principal: "UserContext") -> List[Booking]:
        """Bookings of the calling provider's slots, newest first."""
        return list(db.scalars(
            select(Booking)
            .where(Booking.business_id == principal.user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        ))

    @staticmethod
    def list_customer_bookings(db: Session, principal: "UserContext") -> List[Booking]:
        """Bookings made with the caller's email, newest first."""
        email = (principal.email or "").strip().lower()
        if not email:
            return []
        return list(db.scalars(
            select(Booking)
            .where(func.lower(Booking.customer_email) == email)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        ))

    @staticmethod
    def get_ticket_by_number(
        db: Session,
        booking_number: str,
        principal: Optional["UserContext"] = None,
        email: Optional[str] = None,
    ) -> Ticket:
        """
        Look a ticket up by booking number.

        Visible to admins, to the provider of the booking, and to anyone
        presenting the customer email the booking was made with (guests
        included).

        Raises:
            NotFoundError: Unknown number, or the caller may not see it
        """
        ticket = db.scalars(
            select(Ticket).where(Ticket.booking_number == (booking_number or "").strip().upper())
        ).first()
        if ticket is None:
            raise NotFoundError("Ticket not found")

        if email and _same_email(email, ticket.customer_email):
            return ticket
        if principal is not None:
            if principal.is_admin() or _same_email(principal.email, ticket.customer_email):
                return ticket
            if principal.is_provider() and ticket.booking_id is not None:
                booking = db.get(Booking, ticket.booking_id)
                if booking is not None and booking.business_id == principal.user_id:
                    return ticket
        raise NotFoundError("Ticket not found")

    # ===== Maintenance =====

    @staticmethod
    def complete_past_bookings(db: Session, now: Optional[datetime] = None) -> int:
        """
        Mark booked bookings whose slot has ended as completed.

        Returns:
            Number of bookings completed
        """
        now = now or local_now()
        rows = db.execute(
            select(Booking, Slot)
            .join(Slot, Booking.slot_id == Slot.id)
            .where(
                Booking.status == BOOKING_STATUS_BOOKED,
                Slot.date <= now.date().isoformat(),
            )
        ).all()

        completed = 0
        for booking, slot in rows:
            try:
                ended_at = slot_end(slot.date, slot.time, slot.duration)
            except ValueError:
                logger.warning(f"Skipping booking {booking.booking_number}: unparsable slot time")
                continue
            if ended_at <= now:
                booking.status = BOOKING_STATUS_COMPLETED
                completed += 1

        if completed:
            db.commit()
            logger.info(f"Marked {completed} past booking(s) as completed")
        return completed
