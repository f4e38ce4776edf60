"""Connection lifecycle and message handling for the collaboration socket.

A connection moves Connected -> Joined -> Closed. Each inbound frame is
dispatched to one handler per message type; handlers for a connection run
one at a time, so updates for a proposal are broadcast in the order the
update log accepted them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import sessionmaker

from app.collaboration.broadcast import BroadcastRouter
from app.collaboration.identity import display_name_for, identity_from_fields
from app.collaboration.registry import Session, SessionRegistry, SessionState, Transport
from app.schemas.collaborator import CollaboratorRead
from app.schemas.realtime import (
    CollaboratorJoinedMessage,
    CollaboratorsUpdateMessage,
    FieldChangedMessage,
    FieldUpdateMessage,
    JoinProposalMessage,
)
from app.services.collaborators import join_collaborator, list_collaborators
from app.services.proposal_updates import append_update
from app.services.proposals import get_proposal

logger = logging.getLogger(__name__)


class RealtimeProtocolError(RuntimeError):
    """Raised when an inbound frame cannot be decoded into a known message."""


def encode(message: Any) -> dict[str, Any]:
    """Serialize a wire message the way the browser client expects it."""

    return message.model_dump(mode="json", by_alias=True)


def decode(raw: str | bytes | dict[str, Any]) -> dict[str, Any]:
    if isinstance(raw, dict):
        payload = raw
    else:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise RealtimeProtocolError("payload is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise RealtimeProtocolError("payload must be a JSON object")
    if not isinstance(payload.get("type"), str):
        raise RealtimeProtocolError("payload has no message type")
    return payload


class SessionProtocol:
    """Drives sessions through their lifecycle on behalf of the socket endpoint."""

    def __init__(
        self,
        registry: SessionRegistry,
        session_factory: sessionmaker[DbSession],
        router: BroadcastRouter | None = None,
    ) -> None:
        self.registry = registry
        self.session_factory = session_factory
        self.router = router or BroadcastRouter(registry)
        self._handlers: dict[str, Callable[[Session, dict[str, Any]], Awaitable[None]]] = {
            "join_proposal": self.join_proposal,
            "field_update": self.field_update,
        }

    def connect(self, transport: Transport) -> Session:
        return self.registry.open(transport)

    def close(self, session: Session) -> None:
        """Discard the session. Its roster row, if any, is left in place."""

        self.registry.close(session)

    async def handle_message(self, session: Session, raw: str | bytes | dict[str, Any]) -> None:
        """Dispatch one inbound frame; malformed or failed frames are logged and dropped."""

        if session.is_closed:
            return
        try:
            payload = decode(raw)
            handler = self._handlers.get(payload["type"])
            if handler is None:
                raise RealtimeProtocolError(f"unknown message type {payload['type']!r}")
            await handler(session, payload)
        except (RealtimeProtocolError, ValidationError) as exc:
            logger.warning(
                "realtime.message_ignored session_id=%d state=%s error=%s",
                session.session_id,
                session.state.value,
                exc,
            )
        except Exception:
            logger.exception(
                "realtime.message_failed session_id=%d state=%s",
                session.session_id,
                session.state.value,
            )

    async def join_proposal(self, session: Session, payload: dict[str, Any]) -> None:
        if session.state is not SessionState.CONNECTED:
            raise RealtimeProtocolError("join_proposal is only valid before joining")
        message = JoinProposalMessage.model_validate(payload)
        identity = identity_from_fields(message.user_id, message.guest_name)

        with self.session_factory() as db:
            if get_proposal(db, message.proposal_id) is None:
                collaborators = []
            else:
                if identity is not None:
                    join_collaborator(db, message.proposal_id, identity)
                collaborators = [
                    CollaboratorRead.model_validate(row) for row in list_collaborators(db, message.proposal_id)
                ]

        session.bind(message.proposal_id, identity)
        logger.info(
            "realtime.join session_id=%d proposal_id=%d identity=%s roster_size=%d",
            session.session_id,
            message.proposal_id,
            display_name_for(identity),
            len(collaborators),
        )
        await session.send(encode(CollaboratorsUpdateMessage(collaborators=collaborators)))

    async def field_update(self, session: Session, payload: dict[str, Any]) -> None:
        if session.state is not SessionState.JOINED or session.proposal_id is None:
            raise RealtimeProtocolError("field_update requires a joined session")
        message = FieldUpdateMessage.model_validate(payload)

        with self.session_factory() as db:
            append_update(
                db,
                session.proposal_id,
                session.identity,
                message.field,
                message.old_value,
                message.new_value,
            )

        changed = FieldChangedMessage(
            field=message.field,
            value=message.new_value,
            updated_by=display_name_for(session.identity),
        )
        await self.router.broadcast(session.proposal_id, encode(changed), exclude_session=session)

    async def announce_collaborator(self, collaborator: CollaboratorRead) -> None:
        """Tell every joined session that a collaborator was added out of band."""

        await self.router.broadcast(
            collaborator.proposal_id,
            encode(CollaboratorJoinedMessage(collaborator=collaborator)),
        )
