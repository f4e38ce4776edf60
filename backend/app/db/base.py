"""SQLAlchemy metadata registry import for Alembic."""

from app.models import Collaborator, GrantProposal, ProposalUpdate
from app.models.base import Base

__all__ = ["Base", "GrantProposal", "Collaborator", "ProposalUpdate"]
