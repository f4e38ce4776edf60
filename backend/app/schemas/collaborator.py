"""Collaborator roster schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from app.schemas.common import CamelModel
from app.schemas.proposal import GrantProposalRead

CollaboratorRole = Literal["owner", "editor", "viewer"]


class CollaboratorIdentityPayload(CamelModel):
    """Registered user id or guest display name; at least one is required."""

    user_id: int | None = None
    guest_name: str | None = Field(default=None, min_length=1, max_length=255)

    @model_validator(mode="after")
    def _require_identity(self) -> "CollaboratorIdentityPayload":
        if self.user_id is None and not self.guest_name:
            raise ValueError("Either userId or guestName is required")
        return self


class CollaboratorCreate(CollaboratorIdentityPayload):
    """Invite payload for the REST side channel."""

    role: CollaboratorRole = "editor"


class CollaboratorRead(CamelModel):
    """Serialized roster entry."""

    id: int
    proposal_id: int
    user_id: int | None
    guest_name: str | None
    role: CollaboratorRole
    joined_at: datetime


class CollaboratorLeaveResult(CamelModel):
    """Outcome of an explicit leave."""

    removed: bool


class SharedProposalRead(CamelModel):
    """Proposal looked up by share token, with its roster."""

    proposal: GrantProposalRead
    collaborators: list[CollaboratorRead]
