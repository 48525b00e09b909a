# pyright: reportMissingTypeStubs=false
"""
Slot API endpoints: public listing, provider management and the claim.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.dependencies import get_booking_service, get_slot_service
from api.responses import (
    CamelModel, ClaimResponse, DeleteSlotResponse, SlotResponse,
    booking_to_response, slot_to_response, ticket_to_response
)
from auth.dependencies import (
    UserContext, require_approved_provider, require_provider, require_provider_or_admin
)
from core.constants import MAX_STRING_LENGTH
from core.database import get_db
from services.booking_service import BookingService, CustomerDetails
from services.slot_service import SlotService
from utils.rate_limiter import booking_limiter

logger = logging.getLogger(__name__)

router = APIRouter()

check_booking_rate_limit = booking_limiter.dependency()


# ===== Request Models =====

class DoctorInput(CamelModel):
    """Provider display data submitted with a new slot."""
    name: str = Field(..., max_length=MAX_STRING_LENGTH)
    location: str = Field(..., max_length=MAX_STRING_LENGTH)
    email: Optional[str] = Field(None, max_length=MAX_STRING_LENGTH)
    contact_email: Optional[str] = Field(None, max_length=MAX_STRING_LENGTH)


class SlotCreateRequest(CamelModel):
    """Request model for creating a slot."""
    date: str
    time: str
    duration: int
    price: float
    department: str = Field(..., max_length=MAX_STRING_LENGTH)
    doctor: DoctorInput


class ClaimRequest(CamelModel):
    """
    Customer details for a claim.

    Fields are optional at the schema level so that missing values are
    reported as a booking validation error rather than a schema error.
    """
    customer_name: Optional[str] = Field(None, max_length=MAX_STRING_LENGTH)
    customer_email: Optional[str] = Field(None, max_length=MAX_STRING_LENGTH)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_age: Optional[int] = None
    customer_gender: Optional[str] = Field(None, max_length=10)


# ===== Endpoints =====

@router.get("", summary="List bookable slots")
async def list_slots(
    db: Session = Depends(get_db),
    slot_service: SlotService = Depends(get_slot_service)
) -> List[SlotResponse]:
    """
    Unbooked, upcoming slots of approved, active providers with a public profile.
    """
    return [slot_to_response(slot) for slot in slot_service.list_public_slots(db)]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a slot")
def create_slot(
    request: SlotCreateRequest,
    current_user: UserContext = Depends(require_approved_provider),
    db: Session = Depends(get_db),
    slot_service: SlotService = Depends(get_slot_service)
) -> SlotResponse:
    """Publish a new slot. Only approved business or doctor accounts."""
    slot = slot_service.create_slot(
        db,
        current_user,
        date=request.date,
        time=request.time,
        duration=request.duration,
        price=request.price,
        department=request.department,
        doctor=request.doctor.model_dump(),
    )
    return slot_to_response(slot)


@router.get("/my-slots", summary="List the caller's slots")
async def list_my_slots(
    current_user: UserContext = Depends(require_provider),
    db: Session = Depends(get_db),
    slot_service: SlotService = Depends(get_slot_service)
) -> List[SlotResponse]:
    """All slots owned by the calling provider, booked or not."""
    return [slot_to_response(slot) for slot in slot_service.list_provider_slots(db, current_user)]


@router.post(
    "/book/{slot_id}",
    status_code=status.HTTP_201_CREATED,
    summary="Book a slot",
    dependencies=[Depends(check_booking_rate_limit)],
)
def book_slot(
    slot_id: int,
    request: ClaimRequest,
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service)
) -> ClaimResponse:
    """
    Claim a slot for a customer. Open to guests.

    Returns the booking, its ticket (absent if it could not be written) and
    warnings for side effects (emails, PDF) that failed.
    """
    result = booking_service.claim_slot(
        db,
        slot_id,
        CustomerDetails(
            name=request.customer_name,
            email=request.customer_email,
            phone=request.customer_phone,
            age=request.customer_age,
            gender=request.customer_gender,
        ),
    )
    return ClaimResponse(
        booking=booking_to_response(result.booking),
        ticket=ticket_to_response(result.ticket) if result.ticket is not None else None,
        warnings=result.warnings,
    )


@router.delete("/{slot_id}", summary="Delete a slot")
def delete_slot(
    slot_id: int,
    force: bool = Query(False, description="Also cancel the active booking of a booked slot"),
    current_user: UserContext = Depends(require_provider_or_admin),
    db: Session = Depends(get_db),
    slot_service: SlotService = Depends(get_slot_service)
) -> DeleteSlotResponse:
    """
    Delete one of the caller's slots (admins may delete any).

    A booked slot is refused with 409 unless ``force=true``, which cancels the
    booking and emails the customer.
    """
    result = slot_service.delete_slot(db, current_user, slot_id, force=force)
    return DeleteSlotResponse(**result)
