"""Collaborator roster services.

The roster is append-only from the realtime side: joins upsert a row and
connection drops never remove one. Only an explicit leave deletes rows.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.collaboration.identity import GuestIdentity, Identity, RegisteredIdentity
from app.models.collaborator import Collaborator


def join_collaborator(
    db: Session,
    proposal_id: int,
    identity: Identity,
    *,
    role: str = "editor",
) -> Collaborator:
    """Return the roster row for this identity, inserting it on first join."""

    existing = find_collaborator(db, proposal_id, identity)
    if existing is not None:
        return existing
    collaborator = Collaborator(
        proposal_id=proposal_id,
        role=role,
        joined_at=datetime.now(timezone.utc),
        **identity.as_columns(),
    )
    db.add(collaborator)
    db.commit()
    db.refresh(collaborator)
    return collaborator


def add_collaborator(
    db: Session,
    proposal_id: int,
    identity: Identity,
    *,
    role: str = "editor",
) -> Collaborator:
    """Invite path: upsert like a join, but an explicit role overrides the stored one."""

    collaborator = join_collaborator(db, proposal_id, identity, role=role)
    if collaborator.role != role:
        collaborator.role = role
        db.commit()
        db.refresh(collaborator)
    return collaborator


def find_collaborator(db: Session, proposal_id: int, identity: Identity) -> Collaborator | None:
    stmt = _identity_query(proposal_id, identity).order_by(Collaborator.id.asc()).limit(1)
    return db.scalar(stmt)


def list_collaborators(db: Session, proposal_id: int) -> list[Collaborator]:
    """Return the roster in join order."""

    stmt = select(Collaborator).where(Collaborator.proposal_id == proposal_id).order_by(Collaborator.id.asc())
    return list(db.scalars(stmt).all())


def leave_collaborator(db: Session, proposal_id: int, identity: Identity) -> bool:
    """Remove the identity's roster rows; False when nothing matched."""

    rows = list(db.scalars(_identity_query(proposal_id, identity)).all())
    if not rows:
        return False
    for row in rows:
        db.delete(row)
    db.commit()
    return True


def _identity_query(proposal_id: int, identity: Identity):
    stmt = select(Collaborator).where(Collaborator.proposal_id == proposal_id)
    if isinstance(identity, RegisteredIdentity):
        return stmt.where(Collaborator.user_id == identity.user_id)
    if isinstance(identity, GuestIdentity):
        return stmt.where(Collaborator.user_id.is_(None), Collaborator.guest_name == identity.name)
    raise TypeError(f"unsupported identity: {identity!r}")
