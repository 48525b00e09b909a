# pyright: reportMissingTypeStubs=false
"""
Booking API endpoints: listings, cancellation and administrative deletion.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from api.dependencies import get_booking_service
from api.responses import (
    BookingResponse, CamelModel, CancelResponse, DeleteBookingResponse, booking_to_response
)
from auth.dependencies import (
    UserContext, get_current_user, require_admin, require_provider, require_provider_or_admin
)
from core.constants import MAX_STRING_LENGTH
from core.database import get_db
from services.booking_service import BookingService, CancelResult
from utils.rate_limiter import public_cancel_limiter

logger = logging.getLogger(__name__)

router = APIRouter()

check_public_cancel_rate_limit = public_cancel_limiter.dependency()


class PublicCancelRequest(CamelModel):
    """Guest cancellation: booking number plus the email used to book."""
    booking_number: str = Field(..., max_length=32)
    customer_email: str = Field(..., max_length=MAX_STRING_LENGTH)


def _cancel_response(result: CancelResult) -> CancelResponse:
    return CancelResponse(
        status=result.booking.status,
        message="Booking was already cancelled" if result.already_cancelled else "Booking cancelled",
        already_cancelled=result.already_cancelled,
        booking=booking_to_response(result.booking),
        warnings=result.warnings,
    )


@router.get("", summary="List all bookings")
async def list_bookings(
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db)
) -> List[BookingResponse]:
    """All bookings, newest first. Admins only."""
    return [booking_to_response(b) for b in BookingService.list_bookings(db)]


@router.get("/my-bookings", summary="List bookings of the caller's slots")
async def list_provider_bookings(
    current_user: UserContext = Depends(require_provider),
    db: Session = Depends(get_db)
) -> List[BookingResponse]:
    """Bookings of the calling provider's slots, newest first."""
    return [booking_to_response(b) for b in BookingService.list_provider_bookings(db, current_user)]


@router.get("/mine", summary="List the caller's own bookings")
async def list_customer_bookings(
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[BookingResponse]:
    """Bookings made with the caller's email address."""
    return [booking_to_response(b) for b in BookingService.list_customer_bookings(db, current_user)]


@router.post(
    "/cancel-public",
    summary="Cancel a booking as a guest",
    dependencies=[Depends(check_public_cancel_rate_limit)],
)
def cancel_booking_public(
    request: PublicCancelRequest,
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service)
) -> CancelResponse:
    """
    Cancel with the booking number and customer email instead of a login.

    Subject to the same 2-hour cutoff as authenticated cancellation.
    """
    result = booking_service.cancel_booking_by_number(db, request.booking_number, request.customer_email)
    return _cancel_response(result)


@router.get("/{booking_id}", summary="Get a booking")
async def get_booking(
    booking_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> BookingResponse:
    """Visible to admins, the owning provider and the customer who booked it."""
    return booking_to_response(BookingService.get_booking(db, booking_id, current_user))


@router.post("/{booking_id}/cancel", summary="Cancel a booking")
def cancel_booking(
    booking_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service)
) -> CancelResponse:
    """
    Cancel one of the caller's bookings, up to 2 hours before the slot starts.

    Cancelling an already cancelled booking succeeds without changes.
    """
    result = booking_service.cancel_booking(db, booking_id, current_user)
    return _cancel_response(result)


@router.delete("/{booking_id}", summary="Delete a booking")
def delete_booking(
    booking_id: int,
    current_user: UserContext = Depends(require_provider_or_admin),
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service)
) -> DeleteBookingResponse:
    """
    Remove a booking entirely (admin, or the provider that owns it).

    The slot is freed and the ticket is kept, detached from the booking.
    """
    warnings = booking_service.delete_booking(db, booking_id, current_user)
    return DeleteBookingResponse(deleted=True, warnings=warnings)
