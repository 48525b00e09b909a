# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions for user authentication and
role-based access control. The authenticated caller is represented by a
``UserContext`` and passed explicitly into service calls.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.constants import ADMIN_ROLES, APPROVAL_APPROVED, PROVIDER_ROLES
from core.database import get_db
from services.jwt_service import jwt_service, TokenPayload
from models import User

logger = logging.getLogger(__name__)


class UserContext:
    """Authenticated user context: identity from the JWT, role and approval from the database."""

    def __init__(
        self,
        user_id: int,
        email: str,
        role: str,
        name: str,
        approval_status: str = APPROVAL_APPROVED,
        is_active: bool = True
    ):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.name = name
        self.approval_status = approval_status
        self.is_active = is_active

    @classmethod
    def from_user(cls, user: User) -> "UserContext":
        return cls(
            user_id=user.id,
            email=user.email,
            role=user.role,
            name=user.name,
            approval_status=user.approval_status,
            is_active=user.is_active
        )

    def is_admin(self) -> bool:
        """Check if user is an admin or super admin."""
        return self.role in ADMIN_ROLES

    def is_provider(self) -> bool:
        """Check if user is a business or doctor account."""
        return self.role in PROVIDER_ROLES

    def is_approved(self) -> bool:
        return self.approval_status == APPROVAL_APPROVED

    def __repr__(self) -> str:
        return f"UserContext(user_id={self.user_id}, email='{self.email}', role='{self.role}')"


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return jwt_service.verify_token(credentials.credentials)


def get_current_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> UserContext:
    """Get authenticated user context from JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided"
        )

    try:
        user_id = int(payload.sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject"
        )

    user = db.get(User, user_id)
    if not user or user.email != payload.email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )

    return UserContext.from_user(user)


# Role-based authorization dependencies
def require_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require admin or super admin access."""
    if not user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def require_provider(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require a business or doctor account (approval not checked)."""
    if not user.is_provider():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Business or doctor access required"
        )
    return user


def require_approved_provider(user: UserContext = Depends(require_provider)) -> UserContext:
    """Require an approved business or doctor account."""
    if not user.is_approved():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is awaiting admin approval"
        )
    return user


def require_provider_or_admin(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require a provider account or an admin."""
    if not (user.is_provider() or user.is_admin()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Business, doctor or admin access required"
        )
    return user


# Optional authentication (for endpoints that work with or without auth)
def get_optional_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> Optional[UserContext]:
    """Get user context if authenticated, None otherwise."""
    if not payload:
        return None

    try:
        return get_current_user(payload, db)
    except HTTPException:
        return None
