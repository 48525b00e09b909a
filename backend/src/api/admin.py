# pyright: reportMissingTypeStubs=false
"""
Admin API endpoints: user listing, provider approval and user removal.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_admin_service
from api.responses import MessageResponse, UserResponse, user_to_response
from auth.dependencies import UserContext, require_admin
from core.database import get_db
from services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", summary="List users")
async def list_users(
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Approval status"),
    q: Optional[str] = Query(None, description="Search by name or email"),
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db)
) -> List[UserResponse]:
    """List user accounts, optionally filtered."""
    return [user_to_response(u) for u in AdminService.list_users(db, role=role, approval_status=status, q=q)]


@router.get("/pending-doctors", summary="List providers awaiting approval")
async def list_pending_doctors(
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db)
) -> List[UserResponse]:
    return [user_to_response(u) for u in AdminService.list_pending_providers(db)]


@router.patch("/doctors/{user_id}/approve", summary="Approve a provider")
async def approve_doctor(
    user_id: int,
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    """Approve a business or doctor account."""
    return user_to_response(admin_service.approve_provider(db, user_id))


@router.patch("/doctors/{user_id}/reject", summary="Reject a provider")
async def reject_doctor(
    user_id: int,
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    """Reject a business or doctor account. Its slots leave the public listing."""
    return user_to_response(admin_service.reject_provider(db, user_id))


@router.delete("/users/{user_id}", summary="Remove a user")
async def remove_user(
    user_id: int,
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db),
    admin_service: AdminService = Depends(get_admin_service)
) -> MessageResponse:
    """Permanently delete a user account."""
    admin_service.remove_user(db, current_user, user_id)
    return MessageResponse(message="User removed")
