"""Collaborator roster, share-link and update-log routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.orm import Session

from app.collaboration.identity import identity_from_fields
from app.config import get_settings
from app.db.dependencies import get_db
from app.schemas.collaborator import (
    CollaboratorCreate,
    CollaboratorIdentityPayload,
    CollaboratorLeaveResult,
    CollaboratorRead,
    SharedProposalRead,
)
from app.schemas.common import ApiResponse
from app.schemas.proposal import GrantProposalRead
from app.schemas.proposal_update import ProposalUpdateRead
from app.services.collaborators import add_collaborator, leave_collaborator, list_collaborators
from app.services.proposal_updates import list_recent_updates
from app.services.proposals import get_proposal_by_share_token


router = APIRouter(prefix="/api/proposals")


@router.get("/shared/{share_token}", response_model=ApiResponse[SharedProposalRead])
def read_shared_proposal(
    share_token: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[SharedProposalRead]:
    """Resolve a share link to the proposal and its roster."""

    proposal = get_proposal_by_share_token(db, share_token)
    if proposal is None:
        raise HTTPException(status_code=404, detail="Shared proposal not found")
    return ApiResponse(
        data=SharedProposalRead(
            proposal=GrantProposalRead.model_validate(proposal),
            collaborators=[CollaboratorRead.model_validate(row) for row in list_collaborators(db, proposal.id)],
        )
    )


@router.get("/{proposal_id}/collaborators", response_model=ApiResponse[list[CollaboratorRead]])
def get_collaborators(
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[CollaboratorRead]]:
    return ApiResponse(data=[CollaboratorRead.model_validate(row) for row in list_collaborators(db, proposal_id)])


@router.post("/{proposal_id}/collaborators", response_model=ApiResponse[CollaboratorRead])
async def post_collaborator(
    request: Request,
    payload: CollaboratorCreate,
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[CollaboratorRead]:
    """Invite a collaborator and announce it to everyone on the proposal's socket."""

    identity = identity_from_fields(payload.user_id, payload.guest_name)
    if identity is None:
        raise HTTPException(status_code=422, detail="Either userId or guestName is required")
    collaborator = CollaboratorRead.model_validate(add_collaborator(db, proposal_id, identity, role=payload.role))
    await request.app.state.session_protocol.announce_collaborator(collaborator)
    return ApiResponse(data=collaborator)


@router.delete("/{proposal_id}/collaborators", response_model=ApiResponse[CollaboratorLeaveResult])
def remove_collaborator(
    payload: CollaboratorIdentityPayload,
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[CollaboratorLeaveResult]:
    """Explicit leave; the only way a roster entry is removed."""

    identity = identity_from_fields(payload.user_id, payload.guest_name)
    if identity is None:
        raise HTTPException(status_code=422, detail="Either userId or guestName is required")
    return ApiResponse(data=CollaboratorLeaveResult(removed=leave_collaborator(db, proposal_id, identity)))


@router.get("/{proposal_id}/updates", response_model=ApiResponse[list[ProposalUpdateRead]])
def get_updates(
    proposal_id: int = Path(..., ge=1),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[ProposalUpdateRead]]:
    """Recent field changes, newest first."""

    settings = get_settings()
    effective_limit = min(limit or settings.updates_default_limit, settings.updates_max_limit)
    return ApiResponse(
        data=[ProposalUpdateRead.model_validate(row) for row in list_recent_updates(db, proposal_id, effective_limit)]
    )
