"""
Slot model representing an offerable appointment window.

Slots are published by approved providers. ``is_booked`` is flipped to True
exactly once by a successful claim (a conditional update, see
``SlotService.try_claim``) and back to False only by a cancellation or a
booking deletion.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Slot(Base):
    """
    Appointment window offered by a provider.

    ``date`` and ``time`` are wall-clock strings in the application timezone.
    The provider display fields are a snapshot taken when the slot is created.
    """

    __tablename__ = "slots"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    business_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """Provider that owns this slot."""

    date: Mapped[str] = mapped_column(String(10))
    """Calendar day, YYYY-MM-DD."""

    time: Mapped[str] = mapped_column(String(8))
    """Start time, HH:MM."""

    duration: Mapped[int] = mapped_column(Integer)
    """Duration in minutes."""

    price: Mapped[float] = mapped_column(Float)
    department: Mapped[str] = mapped_column(String(255))

    # Provider display snapshot
    doctor_name: Mapped[str] = mapped_column(String(255))
    doctor_location: Mapped[str] = mapped_column(String(255))
    doctor_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    doctor_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    doctor_contact_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    is_booked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_slots_business', 'business_id'),
        Index('idx_slots_date_time', 'date', 'time'),
        Index('idx_slots_booked_date', 'is_booked', 'date'),
    )

    @property
    def provider_contact_email(self) -> str:
        """Address for provider notices, empty when the slot has none."""
        return self.doctor_email or self.doctor_contact_email or ""

    def doctor_snapshot(self) -> Dict[str, Any]:
        """Copy of the provider display data, for embedding into bookings and tickets."""
        return {
            "name": self.doctor_name,
            "location": self.doctor_location,
            "rating": self.doctor_rating,
            "email": self.doctor_email,
            "contact_email": self.doctor_contact_email,
        }

    def __repr__(self) -> str:
        return f"<Slot(id={self.id}, date='{self.date}', time='{self.time}', is_booked={self.is_booked})>"
