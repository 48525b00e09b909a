"""
User model for customers, providers and administrators.

Providers ("business" and "doctor" accounts) carry an approval status that
gates slot creation and the visibility of their slots in the public listing.
"""

from datetime import datetime

from sqlalchemy import Boolean, Index, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import (
    ADMIN_ROLES, APPROVAL_APPROVED, PROVIDER_ROLES, ROLE_CUSTOMER
)
from core.database import Base


class User(Base):
    """Account of any role. Authentication happens upstream; this table holds identity and gating state."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True)  # Globally unique

    role: Mapped[str] = mapped_column(String(20), default=ROLE_CUSTOMER, nullable=False)
    """One of 'customer', 'business', 'doctor', 'admin', 'super_admin'."""

    approval_status: Mapped[str] = mapped_column(String(20), default=APPROVAL_APPROVED, nullable=False)
    """'pending', 'approved' or 'rejected'. Only meaningful for provider roles."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_users_role_approval', 'role', 'approval_status'),
    )

    @property
    def is_provider(self) -> bool:
        return self.role in PROVIDER_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_approved(self) -> bool:
        return self.approval_status == APPROVAL_APPROVED

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
