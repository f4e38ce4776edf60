"""Collaboration WebSocket route."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from app.collaboration.protocol import SessionProtocol

logger = logging.getLogger(__name__)

router = APIRouter()


class WebSocketTransport:
    """Adapts a Starlette WebSocket to the session transport interface."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_writable(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, payload: dict[str, Any]) -> None:
        await self.websocket.send_json(payload)


def get_session_protocol(websocket: WebSocket) -> SessionProtocol:
    return websocket.app.state.session_protocol


@router.websocket("/ws")
async def collaboration_socket(
    websocket: WebSocket,
    protocol: SessionProtocol = Depends(get_session_protocol),
) -> None:
    """Run one connection through connect, message exchange and close."""

    await websocket.accept()
    session = protocol.connect(WebSocketTransport(websocket))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            await protocol.handle_message(session, raw)
    except WebSocketDisconnect:
        logger.debug("realtime.disconnect session_id=%d", session.session_id)
    finally:
        protocol.close(session)
