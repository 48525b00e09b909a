"""
Admin service: user listing, provider approval and user removal.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from core.constants import (
    ALL_ROLES, APPROVAL_APPROVED, APPROVAL_PENDING, APPROVAL_REJECTED, APPROVAL_STATUSES,
    PROVIDER_ROLES, ROLE_SUPER_ADMIN
)
from core.errors import BookingValidationError, ForbiddenError, NotFoundError
from models import User
from services.event_publisher import (
    DOCTOR_APPROVED, DOCTOR_REJECTED, USER_REMOVED, EventPublisher
)
from utils.best_effort import run_best_effort

if TYPE_CHECKING:
    from auth.dependencies import UserContext

logger = logging.getLogger(__name__)


class AdminService:
    """
    Service class for admin moderation.

    Approval status gates slot creation and public slot visibility for
    provider accounts; it has no effect on customers.
    """

    def __init__(self, publisher: EventPublisher):
        self.publisher = publisher

    @staticmethod
    def list_users(
        db: Session,
        role: Optional[str] = None,
        approval_status: Optional[str] = None,
        q: Optional[str] = None,
    ) -> List[User]:
        """
        List users, optionally filtered by role, approval status and a name/email search.

        Raises:
            BookingValidationError: Unknown role or approval status filter
        """
        query = select(User)
        if role:
            if role not in ALL_ROLES:
                raise BookingValidationError(f"Unknown role: {role}")
            query = query.where(User.role == role)
        if approval_status:
            if approval_status not in APPROVAL_STATUSES:
                raise BookingValidationError(f"Unknown approval status: {approval_status}")
            query = query.where(User.approval_status == approval_status)
        if q and q.strip():
            pattern = f"%{q.strip()}%"
            query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return list(db.scalars(query.order_by(User.created_at.desc(), User.id.desc())))

    @staticmethod
    def list_pending_providers(db: Session) -> List[User]:
        """Provider accounts awaiting approval, oldest first."""
        return list(db.scalars(
            select(User)
            .where(
                User.role.in_(PROVIDER_ROLES),
                User.approval_status == APPROVAL_PENDING,
            )
            .order_by(User.created_at.asc(), User.id.asc())
        ))

    def _set_approval(self, db: Session, user_id: int, approval_status: str, topic: str) -> User:
        user = db.get(User, user_id)
        if user is None or user.role not in PROVIDER_ROLES:
            raise NotFoundError("Doctor not found")

        user.approval_status = approval_status
        db.commit()
        logger.info(f"Provider {user.id} approval status set to {approval_status}")

        run_best_effort(
            f"publish {topic}", self.publisher.publish,
            topic, {"id": user.id, "approvalStatus": approval_status}
        )
        return user

    def approve_provider(self, db: Session, user_id: int) -> User:
        """Approve a provider: its slots become creatable and publicly visible."""
        return self._set_approval(db, user_id, APPROVAL_APPROVED, DOCTOR_APPROVED)

    def reject_provider(self, db: Session, user_id: int) -> User:
        """Reject a provider: its slots disappear from the public listing."""
        return self._set_approval(db, user_id, APPROVAL_REJECTED, DOCTOR_REJECTED)

    def remove_user(self, db: Session, principal: "UserContext", user_id: int) -> None:
        """
        Permanently delete a user account.

        Raises:
            NotFoundError: User does not exist
            ForbiddenError: Removing yourself, or a super admin without being one
        """
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.id == principal.user_id:
            raise ForbiddenError("You cannot remove your own account")
        if user.role == ROLE_SUPER_ADMIN and principal.role != ROLE_SUPER_ADMIN:
            raise ForbiddenError("Only a super admin can remove a super admin")

        db.delete(user)
        db.commit()
        logger.info(f"User {user_id} removed by {principal.user_id}")

        run_best_effort(f"publish {USER_REMOVED}", self.publisher.publish, USER_REMOVED, {"id": user_id})
