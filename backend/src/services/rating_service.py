"""
Rating service: write-once ratings and the provider aggregate.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import PROVIDER_ROLES, RATING_MAX_VALUE, RATING_MIN_VALUE
from core.errors import BookingValidationError, ConflictError, NotFoundError
from models import Doctor, Rating, User
from services.event_publisher import DOCTOR_RATING_UPDATED, EventPublisher
from utils.best_effort import run_best_effort

if TYPE_CHECKING:
    from auth.dependencies import UserContext

logger = logging.getLogger(__name__)


class RatingService:
    """
    Service class for provider ratings.

    Each (user, provider) pair may be rated once. The provider's cached
    ``rating``/``rating_count`` is recomputed in full from the ratings table on
    every write, never incrementally.
    """

    def __init__(self, publisher: EventPublisher):
        self.publisher = publisher

    @staticmethod
    def recompute_aggregate(db: Session, doctor_id: int) -> Dict[str, Any]:
        """
        Recompute the average and count for one provider and store it on its profile.

        Does not commit.
        """
        average, count = db.execute(
            select(func.avg(Rating.value), func.count(Rating.id)).where(Rating.doctor_id == doctor_id)
        ).one()
        average = float(average or 0.0)
        count = int(count or 0)

        profile = db.scalars(select(Doctor).where(Doctor.business_id == doctor_id)).first()
        if profile is not None:
            profile.rating = average
            profile.rating_count = count
        return {"average": average, "count": count}

    def rate(self, db: Session, principal: "UserContext", doctor_id: int, value: float) -> Dict[str, Any]:
        """
        Record the caller's rating of a provider.

        Args:
            db: Database session
            principal: The rater
            doctor_id: Rated provider's user id
            value: Score in [0, 5]

        Returns:
            {"average": float, "count": int, "my_rating": float} after the write

        Raises:
            BookingValidationError: Value out of range
            NotFoundError: Provider does not exist
            ConflictError: Caller already rated this provider
        """
        if value is None or isinstance(value, bool) or not RATING_MIN_VALUE <= value <= RATING_MAX_VALUE:
            raise BookingValidationError(f"Rating must be between {RATING_MIN_VALUE} and {RATING_MAX_VALUE}")

        provider = db.get(User, doctor_id)
        if provider is None or provider.role not in PROVIDER_ROLES:
            raise NotFoundError("Doctor not found")

        existing = db.scalars(
            select(Rating).where(Rating.user_id == principal.user_id, Rating.doctor_id == doctor_id)
        ).first()
        if existing is not None:
            raise ConflictError("You have already rated this doctor")

        db.add(Rating(user_id=principal.user_id, doctor_id=doctor_id, value=float(value)))
        try:
            db.flush()
        except IntegrityError:
            # Lost a race against a concurrent rating by the same user
            db.rollback()
            raise ConflictError("You have already rated this doctor")

        aggregate = self.recompute_aggregate(db, doctor_id)
        db.commit()
        logger.info(
            f"User {principal.user_id} rated provider {doctor_id} {value} "
            f"(average {aggregate['average']:.2f} over {aggregate['count']})"
        )

        run_best_effort(
            f"publish {DOCTOR_RATING_UPDATED}", self.publisher.publish,
            DOCTOR_RATING_UPDATED, {"doctorId": doctor_id, **aggregate}
        )
        return {**aggregate, "my_rating": float(value)}

    @staticmethod
    def get_rating(db: Session, doctor_id: int, principal: Optional["UserContext"] = None) -> Dict[str, Any]:
        """
        Aggregate rating of a provider, plus the caller's own rating when authenticated.

        Returns:
            {"average": float, "count": int, "my_rating": Optional[float]}
        """
        average, count = db.execute(
            select(func.avg(Rating.value), func.count(Rating.id)).where(Rating.doctor_id == doctor_id)
        ).one()

        my_rating = None
        if principal is not None:
            own = db.scalars(
                select(Rating).where(Rating.user_id == principal.user_id, Rating.doctor_id == doctor_id)
            ).first()
            my_rating = own.value if own is not None else None

        return {"average": float(average or 0.0), "count": int(count or 0), "my_rating": my_rating}
