"""Collaborator roster ORM model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin

COLLABORATOR_ROLES = ("owner", "editor", "viewer")


class Collaborator(Base, IdMixin):
    """One participant's membership in a proposal's editing session."""

    __tablename__ = "collaborators"

    proposal_id: Mapped[int] = mapped_column(index=True, nullable=False)
    user_id: Mapped[int | None] = mapped_column(nullable=True)
    guest_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default="editor", nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
