"""Grant proposal request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

ProposalStatus = Literal["draft", "generated", "completed"]


class ProposalFields(CamelModel):
    """The eight form fields that drive proposal generation."""

    organization_name: str = Field(min_length=1)
    project_title: str = Field(min_length=1)
    mission: str = Field(min_length=10, max_length=500)
    description: str = Field(min_length=10, max_length=1000)
    target_population: str = Field(min_length=10, max_length=400)
    amount: str = Field(min_length=1)
    timeline: str = Field(min_length=1)
    goals: str = Field(min_length=10, max_length=800)


class GrantProposalCreate(ProposalFields):
    """Form submission payload."""

    is_public: bool = False


class GrantProposalUpdate(CamelModel):
    """Partial update payload; unset fields are left untouched."""

    organization_name: str | None = Field(default=None, min_length=1)
    project_title: str | None = Field(default=None, min_length=1)
    mission: str | None = Field(default=None, min_length=10, max_length=500)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    target_population: str | None = Field(default=None, min_length=10, max_length=400)
    amount: str | None = Field(default=None, min_length=1)
    timeline: str | None = Field(default=None, min_length=1)
    goals: str | None = Field(default=None, min_length=10, max_length=800)
    generated_proposal: str | None = None
    status: ProposalStatus | None = None
    share_token: str | None = None
    is_public: bool | None = None


class GrantProposalRead(CamelModel):
    """Serialized grant proposal."""

    id: int
    user_id: int | None
    organization_name: str
    project_title: str
    mission: str
    description: str
    target_population: str
    amount: str
    timeline: str
    goals: str
    generated_proposal: str | None
    status: ProposalStatus
    share_token: str | None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class GeneratedProposalRead(CamelModel):
    """Generated text returned without storing it."""

    generated_proposal: str
