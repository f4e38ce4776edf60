"""Proposal field-change audit ORM model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin


class ProposalUpdate(Base, IdMixin):
    """Append-only record of one field change."""

    __tablename__ = "proposal_updates"

    proposal_id: Mapped[int] = mapped_column(index=True, nullable=False)
    user_id: Mapped[int | None] = mapped_column(nullable=True)
    guest_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    field: Mapped[str] = mapped_column(Text, nullable=False)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
