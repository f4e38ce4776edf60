"""Process-wide table of live connections and their session bindings."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from app.collaboration.identity import Identity

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Outbound half of one live connection."""

    @property
    def is_writable(self) -> bool:
        """Whether a send is currently expected to succeed."""

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Write one JSON message to the peer."""


class SessionState(str, Enum):
    CONNECTED = "connected"
    JOINED = "joined"
    CLOSED = "closed"


@dataclass(eq=False, slots=True)
class Session:
    """One live connection's binding to at most one proposal and identity."""

    session_id: int
    transport: Transport
    state: SessionState = SessionState.CONNECTED
    proposal_id: int | None = None
    identity: Identity | None = None

    @property
    def is_joined(self) -> bool:
        return self.state is SessionState.JOINED

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def bind(self, proposal_id: int, identity: Identity | None) -> None:
        if self.state is not SessionState.CONNECTED:
            raise RuntimeError(f"session {self.session_id} cannot join from state {self.state.value}")
        self.proposal_id = proposal_id
        self.identity = identity
        self.state = SessionState.JOINED

    async def send(self, payload: dict[str, Any]) -> bool:
        """Send to this session's peer; closed or unwritable sessions are a no-op."""

        if self.is_closed or not self.transport.is_writable:
            return False
        await self.transport.send_json(payload)
        return True


class SessionRegistry:
    """Owns every Session, keyed by its transport."""

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, transport: Transport) -> Session:
        """Register a new connection in the Connected state."""

        key = id(transport)
        if key in self._sessions:
            raise RuntimeError("transport is already registered")
        session = Session(session_id=next(self._ids), transport=transport)
        self._sessions[key] = session
        logger.info("realtime.session_opened session_id=%d open_sessions=%d", session.session_id, len(self._sessions))
        return session

    def get(self, transport: Transport) -> Session | None:
        return self._sessions.get(id(transport))

    def close(self, session: Session) -> None:
        """Mark the session Closed and discard it; safe to call twice."""

        session.state = SessionState.CLOSED
        removed = self._sessions.pop(id(session.transport), None)
        if removed is not None:
            logger.info(
                "realtime.session_closed session_id=%d proposal_id=%s open_sessions=%d",
                session.session_id,
                session.proposal_id,
                len(self._sessions),
            )

    def joined_to(self, proposal_id: int) -> list[Session]:
        """Snapshot of Joined sessions bound to the proposal, in connection order."""

        return [
            session
            for session in self._sessions.values()
            if session.is_joined and session.proposal_id == proposal_id
        ]

    def clear(self) -> None:
        for session in list(self._sessions.values()):
            self.close(session)
