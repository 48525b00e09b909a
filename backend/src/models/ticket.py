"""
Ticket model: the printable, immutable artifact of a booking.

Tickets are fully denormalized and never mutated. They are permanent
historical records: deleting a booking detaches its ticket (``booking_id``
becomes NULL) instead of deleting it.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    booking_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True
    )

    doctor_name: Mapped[str] = mapped_column(String(255))
    doctor_location: Mapped[str] = mapped_column(String(255))
    doctor_contact: Mapped[str] = mapped_column(String(255), default="N/A", nullable=False)

    customer_name: Mapped[str] = mapped_column(String(255))
    customer_email: Mapped[str] = mapped_column(String(255))
    customer_phone: Mapped[str] = mapped_column(String(50))
    customer_age: Mapped[int] = mapped_column(Integer)
    customer_gender: Mapped[str] = mapped_column(String(10))

    department: Mapped[str] = mapped_column(String(255))
    date: Mapped[str] = mapped_column(String(10))
    time: Mapped[str] = mapped_column(String(8))
    price: Mapped[float] = mapped_column(Float)

    booking_number: Mapped[str] = mapped_column(String(32), unique=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, booking_number='{self.booking_number}')>"
