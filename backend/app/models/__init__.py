"""ORM models package exports."""

from app.models.collaborator import Collaborator
from app.models.proposal import GrantProposal
from app.models.proposal_update import ProposalUpdate

__all__ = [
    "GrantProposal",
    "Collaborator",
    "ProposalUpdate",
]
