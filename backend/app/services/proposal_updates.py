"""Append-only log of proposal field changes."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.collaboration.identity import Identity
from app.models.proposal_update import ProposalUpdate

DEFAULT_RECENT_LIMIT = 50


def append_update(
    db: Session,
    proposal_id: int,
    identity: Identity | None,
    field: str,
    old_value: str | None,
    new_value: str | None,
) -> ProposalUpdate:
    """Record one field change. Field names are not checked against the form."""

    if proposal_id is None:
        raise ValueError("proposal_id is required")
    if not field:
        raise ValueError("field is required")
    columns = identity.as_columns() if identity is not None else {"user_id": None, "guest_name": None}
    update = ProposalUpdate(
        proposal_id=proposal_id,
        field=field,
        old_value=old_value,
        new_value=new_value,
        timestamp=datetime.now(timezone.utc),
        **columns,
    )
    db.add(update)
    db.commit()
    db.refresh(update)
    return update


def list_recent_updates(db: Session, proposal_id: int, limit: int = DEFAULT_RECENT_LIMIT) -> list[ProposalUpdate]:
    """Return at most `limit` updates, newest first."""

    if limit <= 0:
        return []
    stmt = (
        select(ProposalUpdate)
        .where(ProposalUpdate.proposal_id == proposal_id)
        .order_by(ProposalUpdate.timestamp.desc(), ProposalUpdate.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt).all())
