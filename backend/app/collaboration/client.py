"""Asyncio client for the collaboration socket with bounded automatic reconnection."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import websockets
from pydantic import ValidationError
from websockets.exceptions import WebSocketException

from app.config import get_settings
from app.schemas.collaborator import CollaboratorRead

logger = logging.getLogger(__name__)

RECENT_UPDATES_KEPT = 10

FieldUpdateCallback = Callable[[str, str | None, str], None]


@dataclass(slots=True)
class RecentUpdate:
    field: str
    updated_by: str
    timestamp: datetime


@dataclass(slots=True)
class CollaborationState:
    """What the UI renders: connection flag, roster and recent peer edits."""

    is_connected: bool = False
    collaborators: list[CollaboratorRead] = field(default_factory=list)
    recent_updates: list[RecentUpdate] = field(default_factory=list)


class CollaborationClient:
    """Joins one proposal, applies peer edits and reconnects after drops.

    Every (re)connect repeats the join handshake and receives a fresh roster;
    edits broadcast while disconnected are not replayed.
    """

    def __init__(
        self,
        url: str,
        *,
        proposal_id: int | None,
        user_id: int | None = None,
        guest_name: str | None = None,
        on_field_update: FieldUpdateCallback | None = None,
        reconnect_delay: float | None = None,
        max_reconnect_attempts: int | None = None,
        connect: Callable[[str], Any] | None = None,
    ) -> None:
        settings = get_settings()
        self.url = url
        self.proposal_id = proposal_id
        self.user_id = user_id
        self.guest_name = guest_name
        self.on_field_update = on_field_update
        self.reconnect_delay = (
            settings.client_reconnect_delay_seconds if reconnect_delay is None else reconnect_delay
        )
        self.max_reconnect_attempts = (
            settings.client_max_reconnect_attempts if max_reconnect_attempts is None else max_reconnect_attempts
        )
        self.state = CollaborationState()
        self._connect = connect or websockets.connect
        self._ws: Any = None
        self._stopped = False

    @property
    def is_connected(self) -> bool:
        return self.state.is_connected

    async def run(self) -> None:
        """Stay joined until `stop()` is called or the reconnect budget runs out."""

        failures = 0
        while not self._stopped and self.proposal_id is not None:
            try:
                async with self._connect(self.url) as ws:
                    self._ws = ws
                    self.state.is_connected = True
                    failures = 0
                    logger.info("realtime.client_connected url=%s proposal_id=%s", self.url, self.proposal_id)
                    await self._send_join()
                    async for raw in ws:
                        self.handle_message(raw)
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                logger.warning("realtime.client_connection_lost url=%s error=%s", self.url, exc)
            finally:
                self._ws = None
                self.state.is_connected = False

            if self._stopped:
                break
            failures += 1
            if self.max_reconnect_attempts and failures > self.max_reconnect_attempts:
                logger.warning(
                    "realtime.client_gave_up url=%s attempts=%d",
                    self.url,
                    self.max_reconnect_attempts,
                )
                break
            await asyncio.sleep(self.reconnect_delay)

    async def stop(self) -> None:
        """Close deliberately; no reconnect follows."""

        self._stopped = True
        ws = self._ws
        if ws is not None:
            await ws.close()

    async def send_field_update(self, field_name: str, old_value: str | None, new_value: str | None) -> bool:
        """Send an edit; a no-op returning False while disconnected."""

        ws = self._ws
        if ws is None or not self.state.is_connected:
            return False
        await ws.send(
            json.dumps(
                {
                    "type": "field_update",
                    "field": field_name,
                    "oldValue": old_value,
                    "newValue": new_value,
                }
            )
        )
        return True

    def handle_message(self, raw: str | bytes) -> None:
        try:
            data = json.loads(raw)
            message_type = data["type"]
            if message_type == "collaborators_update":
                self.state.collaborators = [CollaboratorRead.model_validate(row) for row in data["collaborators"]]
            elif message_type == "field_changed":
                self._apply_field_changed(data["field"], data.get("value"), data["updatedBy"])
            elif message_type == "collaborator_joined":
                self.state.collaborators.append(CollaboratorRead.model_validate(data["collaborator"]))
            else:
                logger.debug("realtime.client_message_ignored type=%r", message_type)
        except (ValueError, TypeError, KeyError, ValidationError) as exc:
            logger.warning("realtime.client_message_invalid error=%s", exc)

    async def _send_join(self) -> None:
        payload: dict[str, Any] = {"type": "join_proposal", "proposalId": self.proposal_id}
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.guest_name:
            payload["guestName"] = self.guest_name
        await self._ws.send(json.dumps(payload))

    def _apply_field_changed(self, field_name: str, value: str | None, updated_by: str) -> None:
        if self.on_field_update is not None:
            try:
                self.on_field_update(field_name, value, updated_by)
            except Exception:
                logger.exception("realtime.client_callback_failed field=%s updated_by=%s", field_name, updated_by)
        update = RecentUpdate(field=field_name, updated_by=updated_by, timestamp=datetime.now(timezone.utc))
        self.state.recent_updates = [update, *self.state.recent_updates[: RECENT_UPDATES_KEPT - 1]]
