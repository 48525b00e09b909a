# pyright: reportMissingTypeStubs=false
"""
Rating API endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.dependencies import get_rating_service
from api.responses import CamelModel, RatingResponse
from auth.dependencies import UserContext, get_current_user, get_optional_user
from core.database import get_db
from services.rating_service import RatingService

logger = logging.getLogger(__name__)

router = APIRouter()


class RatingRequest(CamelModel):
    """Request model for rating a provider."""
    doctor_id: int
    rating: float


@router.post("", status_code=status.HTTP_201_CREATED, summary="Rate a doctor")
async def rate_doctor(
    request: RatingRequest,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    rating_service: RatingService = Depends(get_rating_service)
) -> RatingResponse:
    """
    Rate a provider once. A second rating of the same provider is refused with 409.
    """
    result = rating_service.rate(db, current_user, request.doctor_id, request.rating)
    return RatingResponse(doctor_id=request.doctor_id, **result)


@router.get("/{doctor_id}", summary="Get a doctor's rating")
async def get_doctor_rating(
    doctor_id: int,
    current_user: Optional[UserContext] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> RatingResponse:
    """Average and count, plus the caller's own rating when authenticated."""
    result = RatingService.get_rating(db, doctor_id, current_user)
    return RatingResponse(doctor_id=doctor_id, **result)
