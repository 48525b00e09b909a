"""
Shared response models for API endpoints.

Field names are snake_case in Python and camelCase on the wire
(``bookingNumber``, ``isBooked``, ...). Routers build responses with the
``*_to_response`` helpers below.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models import Booking, Slot, Ticket, User


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases and populated by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DoctorInfo(CamelModel):
    """Provider display data as snapshotted on a slot or booking."""
    name: str
    location: str
    rating: float = 0.0
    email: Optional[str] = None
    contact_email: Optional[str] = None


class SlotResponse(CamelModel):
    """Response model for a slot."""
    id: int
    business_id: int
    date: str
    time: str
    duration: int
    price: float
    department: str
    doctor: DoctorInfo
    is_booked: bool
    created_at: Optional[datetime] = None


class BookingResponse(CamelModel):
    """Response model for a booking."""
    id: int
    slot_id: Optional[int] = None
    business_id: Optional[int] = None
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_age: int
    customer_gender: str
    doctor: DoctorInfo
    fee: float
    booking_number: str
    status: str
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TicketResponse(CamelModel):
    """Response model for a ticket."""
    id: int
    booking_id: Optional[int] = None
    booking_number: str
    doctor_name: str
    doctor_location: str
    doctor_contact: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_age: int
    customer_gender: str
    department: str
    date: str
    time: str
    price: float
    created_at: Optional[datetime] = None


class ClaimResponse(CamelModel):
    """Response model for a successful slot claim."""
    booking: BookingResponse
    ticket: Optional[TicketResponse] = None
    warnings: List[str] = []


class CancelResponse(CamelModel):
    """Response model for a cancellation (including a repeated one)."""
    status: str
    message: str
    already_cancelled: bool = False
    booking: BookingResponse
    warnings: List[str] = []


class DeleteSlotResponse(CamelModel):
    """Response model for slot deletion."""
    deleted: bool
    forced: bool = False
    cancelled_booking_id: Optional[int] = None
    warnings: List[str] = []


class DeleteBookingResponse(CamelModel):
    """Response model for booking deletion."""
    deleted: bool
    warnings: List[str] = []


class RatingResponse(CamelModel):
    """Aggregate rating of a provider plus the caller's own score."""
    doctor_id: int
    average: float
    count: int
    my_rating: Optional[float] = None


class UserResponse(CamelModel):
    """Response model for a user account."""
    id: int
    name: str
    email: str
    role: str
    approval_status: str
    is_active: bool
    created_at: Optional[datetime] = None


class MessageResponse(CamelModel):
    message: str


def slot_to_response(slot: Slot) -> SlotResponse:
    return SlotResponse(
        id=slot.id,
        business_id=slot.business_id,
        date=slot.date,
        time=slot.time,
        duration=slot.duration,
        price=slot.price,
        department=slot.department,
        doctor=DoctorInfo(
            name=slot.doctor_name,
            location=slot.doctor_location,
            rating=slot.doctor_rating or 0.0,
            email=slot.doctor_email or None,
            contact_email=slot.doctor_contact_email or None,
        ),
        is_booked=slot.is_booked,
        created_at=slot.created_at,
    )


def booking_to_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        slot_id=booking.slot_id,
        business_id=booking.business_id,
        customer_name=booking.customer_name,
        customer_email=booking.customer_email,
        customer_phone=booking.customer_phone,
        customer_age=booking.customer_age,
        customer_gender=booking.customer_gender,
        doctor=DoctorInfo(
            name=booking.doctor_name,
            location=booking.doctor_location,
            rating=booking.doctor_rating or 0.0,
        ),
        fee=booking.fee,
        booking_number=booking.booking_number,
        status=booking.status,
        cancelled_at=booking.cancelled_at,
        created_at=booking.created_at,
    )


def ticket_to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        booking_id=ticket.booking_id,
        booking_number=ticket.booking_number,
        doctor_name=ticket.doctor_name,
        doctor_location=ticket.doctor_location,
        doctor_contact=ticket.doctor_contact,
        customer_name=ticket.customer_name,
        customer_email=ticket.customer_email,
        customer_phone=ticket.customer_phone,
        customer_age=ticket.customer_age,
        customer_gender=ticket.customer_gender,
        department=ticket.department,
        date=ticket.date,
        time=ticket.time,
        price=ticket.price,
        created_at=ticket.created_at,
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        approval_status=user.approval_status,
        is_active=user.is_active,
        created_at=user.created_at,
    )
