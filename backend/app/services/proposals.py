"""Grant proposal storage services."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.proposal import GrantProposal
from app.schemas.proposal import GrantProposalCreate, GrantProposalUpdate

_SHARE_TOKEN_BYTES = 12


def create_proposal(db: Session, payload: GrantProposalCreate, *, user_id: int | None = None) -> GrantProposal:
    """Persist a submitted form as a draft with a fresh share token."""

    now = datetime.now(timezone.utc)
    proposal = GrantProposal(
        user_id=user_id,
        organization_name=payload.organization_name,
        project_title=payload.project_title,
        mission=payload.mission,
        description=payload.description,
        target_population=payload.target_population,
        amount=payload.amount,
        timeline=payload.timeline,
        goals=payload.goals,
        generated_proposal=None,
        status="draft",
        share_token=secrets.token_urlsafe(_SHARE_TOKEN_BYTES),
        is_public=payload.is_public,
        created_at=now,
        updated_at=now,
    )
    db.add(proposal)
    db.commit()
    db.refresh(proposal)
    return proposal


def get_proposal(db: Session, proposal_id: int) -> GrantProposal | None:
    return db.scalar(select(GrantProposal).where(GrantProposal.id == proposal_id))


def get_proposal_by_share_token(db: Session, share_token: str) -> GrantProposal | None:
    return db.scalar(select(GrantProposal).where(GrantProposal.share_token == share_token))


def update_proposal(db: Session, proposal_id: int, payload: GrantProposalUpdate) -> GrantProposal | None:
    """Apply the set fields of a partial update and bump `updated_at`."""

    proposal = get_proposal(db, proposal_id)
    if proposal is None:
        return None
    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(proposal, name, value)
    proposal.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(proposal)
    return proposal


def store_generated_text(db: Session, proposal_id: int, text: str) -> GrantProposal | None:
    """Save generated text and mark the proposal as generated."""

    return update_proposal(
        db,
        proposal_id,
        GrantProposalUpdate(generated_proposal=text, status="generated"),
    )


def delete_proposal(db: Session, proposal_id: int) -> bool:
    proposal = get_proposal(db, proposal_id)
    if proposal is None:
        return False
    db.delete(proposal)
    db.commit()
    return True
