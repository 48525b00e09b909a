"""
Rating model: one write-once score per (user, provider) pair.
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Rating(Base):
    __tablename__ = "ratings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """The rater."""

    doctor_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """The rated provider (its user id, i.e. ``Doctor.business_id``)."""

    value: Mapped[float] = mapped_column(Float)
    """Score in [0, 5]."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'doctor_id', name='uq_ratings_user_doctor'),
        Index('idx_ratings_doctor', 'doctor_id'),
    )

    def __repr__(self) -> str:
        return f"<Rating(user_id={self.user_id}, doctor_id={self.doctor_id}, value={self.value})>"
