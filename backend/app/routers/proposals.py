"""Grant proposal CRUD and generation routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.models.proposal import GrantProposal
from app.schemas.common import ApiResponse, DeleteResult
from app.schemas.proposal import (
    GeneratedProposalRead,
    GrantProposalCreate,
    GrantProposalRead,
    GrantProposalUpdate,
    ProposalFields,
)
from app.services.generation import GenerationError, generate_grant_proposal
from app.services.proposals import (
    create_proposal,
    delete_proposal,
    get_proposal,
    store_generated_text,
    update_proposal,
)


router = APIRouter(prefix="/api")


@router.post("/grant-proposals", response_model=ApiResponse[GrantProposalRead], status_code=201)
def post_proposal(
    payload: GrantProposalCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[GrantProposalRead]:
    """Store a submitted form as a new draft proposal."""

    return ApiResponse(data=GrantProposalRead.model_validate(create_proposal(db, payload)))


@router.get("/grant-proposals", response_model=ApiResponse[list[GrantProposalRead]])
def list_proposals() -> ApiResponse[list[GrantProposalRead]]:
    """No per-user listing without authentication."""

    return ApiResponse(data=[])


@router.get("/grant-proposals/{proposal_id}", response_model=ApiResponse[GrantProposalRead])
def read_proposal(
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[GrantProposalRead]:
    proposal = get_proposal(db, proposal_id)
    if proposal is None:
        raise HTTPException(status_code=404, detail="Proposal not found")
    return ApiResponse(data=GrantProposalRead.model_validate(proposal))


@router.put("/grant-proposals/{proposal_id}", response_model=ApiResponse[GrantProposalRead])
def put_proposal(
    payload: GrantProposalUpdate,
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[GrantProposalRead]:
    """Apply a partial update to a proposal."""

    updated = update_proposal(db, proposal_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Proposal not found")
    return ApiResponse(data=GrantProposalRead.model_validate(updated))


@router.delete("/grant-proposals/{proposal_id}", response_model=ApiResponse[DeleteResult])
def remove_proposal(
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[DeleteResult]:
    if not delete_proposal(db, proposal_id):
        raise HTTPException(status_code=404, detail="Proposal not found")
    return ApiResponse(data=DeleteResult(id=proposal_id, deleted=True))


@router.post("/generate-proposal", response_model=ApiResponse[GeneratedProposalRead])
def generate_from_form(payload: GrantProposalCreate) -> ApiResponse[GeneratedProposalRead]:
    """Generate proposal text from a form without storing anything."""

    try:
        text = generate_grant_proposal(payload)
    except GenerationError as exc:
        raise HTTPException(status_code=502, detail="Failed to generate proposal") from exc
    return ApiResponse(data=GeneratedProposalRead(generated_proposal=text))


@router.post("/grant-proposals/{proposal_id}/generate", response_model=ApiResponse[GrantProposalRead])
def generate_for_proposal(
    proposal_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[GrantProposalRead]:
    """Generate text for a stored proposal and mark it as generated."""

    proposal = get_proposal(db, proposal_id)
    if proposal is None:
        raise HTTPException(status_code=404, detail="Proposal not found")
    try:
        text = generate_grant_proposal(_fields_of(proposal))
    except GenerationError as exc:
        raise HTTPException(status_code=502, detail="Failed to generate proposal") from exc
    updated = store_generated_text(db, proposal_id, text)
    if updated is None:
        raise HTTPException(status_code=404, detail="Proposal not found")
    return ApiResponse(data=GrantProposalRead.model_validate(updated))


def _fields_of(proposal: GrantProposal) -> ProposalFields:
    return ProposalFields.model_construct(
        **{name: getattr(proposal, name) for name in ProposalFields.model_fields}
    )
