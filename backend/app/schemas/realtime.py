"""Wire messages exchanged over the `/ws` collaboration socket."""

from typing import Literal

from pydantic import Field

from app.schemas.collaborator import CollaboratorRead
from app.schemas.common import CamelModel


class JoinProposalMessage(CamelModel):
    """Client request to bind the connection to a proposal."""

    type: Literal["join_proposal"]
    proposal_id: int
    user_id: int | None = None
    guest_name: str | None = Field(default=None, max_length=255)


class FieldUpdateMessage(CamelModel):
    """Client edit of one proposal field."""

    type: Literal["field_update"]
    field: str = Field(min_length=1)
    old_value: str | None = None
    new_value: str | None = None


class CollaboratorsUpdateMessage(CamelModel):
    """Full roster snapshot sent right after a join."""

    type: Literal["collaborators_update"] = "collaborators_update"
    collaborators: list[CollaboratorRead]


class FieldChangedMessage(CamelModel):
    """Peer notification of a field edit."""

    type: Literal["field_changed"] = "field_changed"
    field: str
    value: str | None
    updated_by: str


class CollaboratorJoinedMessage(CamelModel):
    """Peer notification of a collaborator added over REST."""

    type: Literal["collaborator_joined"] = "collaborator_joined"
    collaborator: CollaboratorRead
