"""
Slot service: publishing, listing, claiming and deleting slots.

The claim primitive ``try_claim`` is a conditional update against the stored
row (``is_booked`` false → true), so two concurrent claims of the same slot
can never both succeed.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from core.constants import (
    APPROVAL_APPROVED, BOOKING_STATUS_BOOKED, BOOKING_STATUS_CANCELLED, PROVIDER_ROLES
)
from core.errors import BookingValidationError, ConflictError, ForbiddenError, NotFoundError
from models import Booking, Doctor, Slot, User
from services.email_service import EmailService
from services.event_publisher import (
    BOOKING_CANCELLED, SLOT_CREATED, SLOT_DELETED, EventPublisher
)
from utils.best_effort import run_best_effort
from utils.datetime_utils import is_valid_slot_date, is_valid_slot_time, local_now, local_today

if TYPE_CHECKING:
    from auth.dependencies import UserContext

logger = logging.getLogger(__name__)


def slot_event_payload(slot: Slot) -> Dict[str, Any]:
    """Minimal slot fields carried on the event feed."""
    return {
        "id": slot.id,
        "businessId": slot.business_id,
        "date": slot.date,
        "time": slot.time,
        "duration": slot.duration,
        "price": slot.price,
        "department": slot.department,
        "isBooked": slot.is_booked,
    }


class SlotService:
    """
    Service class for slot operations.

    Args:
        publisher: Event feed for slot changes
        email_service: Used for cancellation emails when a booked slot is force-deleted
    """

    def __init__(self, publisher: EventPublisher, email_service: EmailService):
        self.publisher = publisher
        self.email_service = email_service

    # ===== Claim primitives =====

    @staticmethod
    def try_claim(db: Session, slot_id: int) -> bool:
        """
        Atomically mark a slot as booked if, and only if, it is currently unbooked.

        The write is conditioned on the stored state, not on a value read
        earlier, so only one of any number of concurrent callers can win.
        Does not commit. Loaded ``Slot`` instances are not synchronized;
        refresh them after the commit.

        Returns:
            True if this call flipped the flag, False if the slot was already booked or missing
        """
        result = db.execute(
            update(Slot)
            .where(Slot.id == slot_id, Slot.is_booked.is_(False))
            .values(is_booked=True, updated_at=local_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def release(slot: Slot) -> bool:
        """Mark a slot unbooked. Returns True if it was booked. Does not commit."""
        if not slot.is_booked:
            return False
        slot.is_booked = False
        return True

    # ===== Eligibility =====

    @staticmethod
    def eligible_provider_ids(db: Session) -> set[int]:
        """
        Providers whose slots may appear in the public listing.

        Intersection of approved, active provider accounts and providers that
        have a public Doctor profile.
        """
        approved_active = set(db.scalars(
            select(User.id).where(
                User.role.in_(PROVIDER_ROLES),
                User.approval_status == APPROVAL_APPROVED,
                User.is_active.is_(True),
            )
        ))
        with_profile = set(db.scalars(select(Doctor.business_id)))
        return approved_active & with_profile

    # ===== Queries =====

    def list_public_slots(self, db: Session, today: Optional[date] = None) -> List[Slot]:
        """
        Unbooked, upcoming slots of eligible providers, sorted by date then time.

        Args:
            db: Database session
            today: Earliest calendar day to include (defaults to today in APP_TIMEZONE)
        """
        provider_ids = self.eligible_provider_ids(db)
        if not provider_ids:
            return []

        today_str = (today or local_today()).isoformat()
        return list(db.scalars(
            select(Slot)
            .where(
                Slot.business_id.in_(provider_ids),
                Slot.is_booked.is_(False),
                Slot.date >= today_str,
            )
            .order_by(Slot.date.asc(), Slot.time.asc(), Slot.id.asc())
        ))

    def list_provider_slots(self, db: Session, principal: "UserContext") -> List[Slot]:
        """All slots owned by the calling provider, booked or not."""
        return list(db.scalars(
            select(Slot)
            .where(Slot.business_id == principal.user_id)
            .order_by(Slot.date.asc(), Slot.time.asc(), Slot.id.asc())
        ))

    # ===== Mutations =====

    def create_slot(
        self,
        db: Session,
        principal: "UserContext",
        date: str,
        time: str,
        duration: int,
        price: float,
        department: str,
        doctor: Dict[str, Any],
    ) -> Slot:
        """
        Publish a new slot for the calling provider.

        The provider display data is snapshotted into the slot. The provider's
        public Doctor profile is created on their first slot.

        Raises:
            ForbiddenError: Caller is not an approved, active provider
            BookingValidationError: Missing doctor information or malformed date/time/duration/price
        """
        user = db.get(User, principal.user_id)
        if user is None or not user.is_provider:
            raise ForbiddenError("Only business or doctor accounts can create slots")
        if not user.is_approved or not user.is_active:
            raise ForbiddenError("Your account is awaiting admin approval")

        doctor = doctor or {}
        doctor_name = (doctor.get("name") or "").strip()
        doctor_location = (doctor.get("location") or "").strip()
        if not doctor_name or not doctor_location:
            raise BookingValidationError("Doctor information is required")
        if not department or not department.strip():
            raise BookingValidationError("Department is required")
        if not is_valid_slot_date(date) or not is_valid_slot_time(time):
            raise BookingValidationError("Slot date must be YYYY-MM-DD and time HH:MM")
        if duration is None or duration <= 0:
            raise BookingValidationError("Duration must be a positive number of minutes")
        if price is None or price < 0:
            raise BookingValidationError("Price must not be negative")

        profile = db.scalars(select(Doctor).where(Doctor.business_id == user.id)).first()
        if profile is None:
            profile = Doctor(
                business_id=user.id,
                name=doctor_name,
                location=doctor_location,
                department=department.strip(),
                rating=0.0,
                rating_count=0,
            )
            db.add(profile)
            logger.info(f"Created public profile for provider {user.id}")

        slot = Slot(
            business_id=user.id,
            date=date,
            time=time,
            duration=duration,
            price=price,
            department=department.strip(),
            doctor_name=doctor_name,
            doctor_location=doctor_location,
            doctor_rating=profile.rating or 0.0,
            doctor_email=doctor.get("email") or "",
            doctor_contact_email=doctor.get("contact_email") or doctor.get("contactEmail") or "",
            is_booked=False,
        )
        db.add(slot)
        db.commit()
        logger.info(f"Provider {user.id} created slot {slot.id} on {slot.date} {slot.time}")

        run_best_effort(f"publish {SLOT_CREATED}", self.publisher.publish, SLOT_CREATED, slot_event_payload(slot))
        return slot

    def delete_slot(
        self,
        db: Session,
        principal: "UserContext",
        slot_id: int,
        force: bool = False,
    ) -> Dict[str, Any]:
        """
        Delete a slot owned by the caller (admins may delete any slot).

        A booked slot is only deleted when ``force`` is set. The active
        booking is then cancelled (status-only write) and its customer gets a
        best-effort cancellation email.

        Returns:
            {"deleted": True, "forced": bool, "cancelled_booking_id": Optional[int], "warnings": [...]}

        Raises:
            NotFoundError: Slot missing or not owned by the caller
            ConflictError: Slot is booked and ``force`` is not set
        """
        slot = db.get(Slot, slot_id)
        if slot is None or (slot.business_id != principal.user_id and not principal.is_admin()):
            raise NotFoundError("Slot not found or you don't have permission to delete it")

        if slot.is_booked and not force:
            raise ConflictError(
                "Cannot delete a booked slot. Please cancel the booking first or use emergency delete."
            )

        cancelled_booking: Optional[Booking] = None
        if slot.is_booked:
            cancelled_booking = db.scalars(
                select(Booking).where(
                    Booking.slot_id == slot.id,
                    Booking.status == BOOKING_STATUS_BOOKED,
                )
            ).first()
            if cancelled_booking is not None:
                cancelled_booking.status = BOOKING_STATUS_CANCELLED
                cancelled_booking.cancelled_at = local_now()

        db.delete(slot)
        db.commit()
        logger.info(f"Deleted slot {slot_id}{' (forced)' if force else ''}")

        warnings: List[str] = []
        if cancelled_booking is not None:
            logger.info(f"Cancelled booking {cancelled_booking.booking_number} for force-deleted slot {slot_id}")
            if not run_best_effort(
                "send cancellation email",
                self.email_service.send_booking_cancellation, cancelled_booking, slot
            ):
                warnings.append("Cancellation email could not be sent")
            run_best_effort(
                f"publish {BOOKING_CANCELLED}", self.publisher.publish,
                BOOKING_CANCELLED, {"id": cancelled_booking.id, "slotId": slot_id}
            )

        run_best_effort(
            f"publish {SLOT_DELETED}", self.publisher.publish,
            SLOT_DELETED, {"id": slot_id, "slotId": slot_id}
        )

        return {
            "deleted": True,
            "forced": bool(force and cancelled_booking is not None),
            "cancelled_booking_id": cancelled_booking.id if cancelled_booking else None,
            "warnings": warnings,
        }
