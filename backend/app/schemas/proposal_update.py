"""Proposal update log schemas."""

from datetime import datetime

from app.schemas.common import CamelModel


class ProposalUpdateRead(CamelModel):
    """Serialized field-change record."""

    id: int
    proposal_id: int
    user_id: int | None
    guest_name: str | None
    field: str
    old_value: str | None
    new_value: str | None
    timestamp: datetime
