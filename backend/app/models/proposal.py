"""Grant proposal ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin

PROPOSAL_STATUSES = ("draft", "generated", "completed")


class GrantProposal(Base, IdMixin, CreatedAtMixin):
    """Shared grant proposal form edited by collaborators."""

    __tablename__ = "grant_proposals"

    user_id: Mapped[int | None] = mapped_column(nullable=True)
    organization_name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_title: Mapped[str] = mapped_column(String(255), nullable=False)
    mission: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    target_population: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[str] = mapped_column(String(64), nullable=False)
    timeline: Mapped[str] = mapped_column(String(255), nullable=False)
    goals: Mapped[str] = mapped_column(Text, nullable=False)
    generated_proposal: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="draft", nullable=False)
    share_token: Mapped[str | None] = mapped_column(String(64), unique=True, index=True, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
