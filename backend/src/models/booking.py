"""
Booking model representing a confirmed reservation of a slot.

A booking is created in the same transaction that claims its slot. The
provider display data and fee are copied from the slot at claim time so that
later edits to the slot or provider never alter historical bookings.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import BOOKING_STATUS_BOOKED
from core.database import Base


class Booking(Base):
    """Reservation of one slot by one customer."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    slot_id: Mapped[Optional[int]] = mapped_column(ForeignKey("slots.id", ondelete="SET NULL"), nullable=True)
    """Slot this booking was created from. Kept as history after the slot is deleted."""

    business_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    """Provider copied from the slot at claim time."""

    customer_name: Mapped[str] = mapped_column(String(255))
    customer_email: Mapped[str] = mapped_column(String(255))
    customer_phone: Mapped[str] = mapped_column(String(50))
    customer_age: Mapped[int] = mapped_column(Integer)
    customer_gender: Mapped[str] = mapped_column(String(10))
    """'Male', 'Female' or 'Other'."""

    # Doctor snapshot copied from the slot
    doctor_name: Mapped[str] = mapped_column(String(255))
    doctor_location: Mapped[str] = mapped_column(String(255))
    doctor_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    fee: Mapped[float] = mapped_column(Float)

    booking_number: Mapped[str] = mapped_column(String(32), unique=True)
    """Human-readable, globally unique booking number (ZARVO-XXXXXXXX)."""

    status: Mapped[str] = mapped_column(String(20), default=BOOKING_STATUS_BOOKED, nullable=False)
    """'booked', 'completed' or 'cancelled'."""

    cancelled_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_bookings_slot_status', 'slot_id', 'status'),
        Index('idx_bookings_business', 'business_id'),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, booking_number='{self.booking_number}', status='{self.status}')>"


# Customer lookups compare emails case-insensitively
Index('idx_bookings_customer_email_lower', func.lower(Booking.customer_email))
