"""Fan-out of server messages to every other session joined to a proposal."""

from __future__ import annotations

import logging
from typing import Any

from app.collaboration.registry import Session, SessionRegistry

logger = logging.getLogger(__name__)


class BroadcastRouter:
    """Delivers a message to the peers of a proposal, best effort, no retry."""

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    async def broadcast(
        self,
        proposal_id: int,
        message: dict[str, Any],
        exclude_session: Session | None = None,
    ) -> None:
        for session in self.registry.joined_to(proposal_id):
            if session is exclude_session:
                continue
            try:
                delivered = await session.send(message)
            except Exception as exc:  # noqa: BLE001
                logger.debug(
                    "realtime.broadcast_skipped session_id=%d proposal_id=%d error=%s",
                    session.session_id,
                    proposal_id,
                    exc,
                )
                continue
            if not delivered:
                logger.debug(
                    "realtime.broadcast_skipped session_id=%d proposal_id=%d reason=unwritable",
                    session.session_id,
                    proposal_id,
                )
