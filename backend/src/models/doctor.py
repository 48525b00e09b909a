"""
Doctor model: the public profile of a provider.

A profile is created lazily the first time a provider publishes a slot. The
public slot listing only shows providers that have one. ``rating`` and
``rating_count`` cache the aggregate of the ratings table and are recomputed
in full on every rating write.
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Doctor(Base):
    """Denormalized public provider profile."""

    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    business_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True)
    """The provider account this profile belongs to. Ratings reference providers by this id."""

    name: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(255))
    department: Mapped[str] = mapped_column(String(255))

    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    """Average of all ratings for this provider."""

    rating_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, business_id={self.business_id}, name='{self.name}')>"
