"""Tests for the reconnecting collaboration client."""

from __future__ import annotations

import asyncio
import json
import unittest
from typing import Any

from app.collaboration.client import RECENT_UPDATES_KEPT, CollaborationClient


class _FakeSocket:
    def __init__(self, incoming: list[dict[str, Any]] | None = None) -> None:
        self.incoming = [json.dumps(message) for message in incoming or []]
        self.sent: list[dict[str, Any]] = []
        self.closed = False

    async def __aenter__(self) -> "_FakeSocket":
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False

    def __aiter__(self) -> "_FakeSocket":
        return self

    async def __anext__(self) -> str:
        if self.closed or not self.incoming:
            raise StopAsyncIteration
        return self.incoming.pop(0)

    async def send(self, data: str) -> None:
        self.sent.append(json.loads(data))

    async def close(self) -> None:
        self.closed = True


class _Dialer:
    """Hands out scripted sockets, then refuses connections."""

    def __init__(self, *sockets: _FakeSocket) -> None:
        self.sockets = list(sockets)
        self.attempts = 0

    def __call__(self, url: str) -> _FakeSocket:
        self.attempts += 1
        if not self.sockets:
            raise OSError(f"connection refused: {url}")
        return self.sockets.pop(0)


def _roster(*names: str) -> dict[str, Any]:
    return {
        "type": "collaborators_update",
        "collaborators": [
            {
                "id": index + 1,
                "proposalId": 42,
                "userId": None,
                "guestName": name,
                "role": "editor",
                "joinedAt": "2026-10-19T10:00:00Z",
            }
            for index, name in enumerate(names)
        ],
    }


class CollaborationClientTests(unittest.TestCase):
    def test_every_connection_rejoins_and_reconnects_are_bounded(self) -> None:
        first = _FakeSocket([_roster("Alice")])
        second = _FakeSocket([_roster("Alice", "Bob")])
        dialer = _Dialer(first, second)
        client = CollaborationClient(
            "ws://test/ws",
            proposal_id=42,
            guest_name="Alice",
            reconnect_delay=0,
            max_reconnect_attempts=2,
            connect=dialer,
        )

        asyncio.run(client.run())

        expected_join = {"type": "join_proposal", "proposalId": 42, "guestName": "Alice"}
        self.assertEqual(first.sent, [expected_join])
        self.assertEqual(second.sent, [expected_join])
        self.assertEqual(dialer.attempts, 4)
        self.assertFalse(client.is_connected)
        self.assertEqual([c.guest_name for c in client.state.collaborators], ["Alice", "Bob"])

    def test_no_connection_without_proposal(self) -> None:
        dialer = _Dialer(_FakeSocket())
        client = CollaborationClient("ws://test/ws", proposal_id=None, connect=dialer)

        asyncio.run(client.run())

        self.assertEqual(dialer.attempts, 0)

    def test_peer_edits_invoke_callback_and_keep_recent_history(self) -> None:
        received: list[tuple[str, str | None, str]] = []
        client = CollaborationClient(
            "ws://test/ws",
            proposal_id=42,
            on_field_update=lambda field, value, by: received.append((field, value, by)),
            connect=_Dialer(),
        )

        for index in range(RECENT_UPDATES_KEPT + 2):
            client.handle_message(
                json.dumps({"type": "field_changed", "field": "goals", "value": str(index), "updatedBy": "Bob"})
            )

        self.assertEqual(len(received), RECENT_UPDATES_KEPT + 2)
        self.assertEqual(received[0], ("goals", "0", "Bob"))
        self.assertEqual(len(client.state.recent_updates), RECENT_UPDATES_KEPT)
        self.assertEqual(client.state.recent_updates[0].updated_by, "Bob")

    def test_failing_callback_does_not_end_the_connection(self) -> None:
        def explode(field: str, value: str | None, updated_by: str) -> None:
            raise RuntimeError("render failed")

        socket = _FakeSocket(
            [
                {"type": "field_changed", "field": "goals", "value": "a", "updatedBy": "Bob"},
                _roster("Alice", "Bob"),
            ]
        )
        dialer = _Dialer(socket)
        client = CollaborationClient(
            "ws://test/ws",
            proposal_id=42,
            guest_name="Alice",
            on_field_update=explode,
            reconnect_delay=0,
            max_reconnect_attempts=1,
            connect=dialer,
        )

        with self.assertLogs("app.collaboration.client", level="ERROR"):
            asyncio.run(client.run())

        self.assertEqual(len(client.state.recent_updates), 1)
        self.assertEqual([c.guest_name for c in client.state.collaborators], ["Alice", "Bob"])
        self.assertEqual(dialer.attempts, 2)

    def test_collaborator_joined_extends_roster_and_bad_frames_are_ignored(self) -> None:
        client = CollaborationClient("ws://test/ws", proposal_id=42, connect=_Dialer())
        client.handle_message(json.dumps(_roster("Alice")))
        client.handle_message(
            json.dumps({"type": "collaborator_joined", "collaborator": _roster("Dana")["collaborators"][0]})
        )
        client.handle_message("{broken")
        client.handle_message(json.dumps({"type": "field_changed"}))
        client.handle_message(json.dumps({"type": "something_new"}))

        self.assertEqual([c.guest_name for c in client.state.collaborators], ["Alice", "Dana"])
        self.assertEqual(client.state.recent_updates, [])

    def test_send_field_update_is_noop_while_disconnected(self) -> None:
        client = CollaborationClient("ws://test/ws", proposal_id=42, connect=_Dialer())

        self.assertFalse(asyncio.run(client.send_field_update("mission", "", "Help kids")))

    def test_stop_closes_socket_without_reconnecting(self) -> None:
        socket = _FakeSocket()
        dialer = _Dialer(socket, _FakeSocket())

        async def scenario() -> bool:
            client = CollaborationClient(
                "ws://test/ws",
                proposal_id=42,
                user_id=3,
                reconnect_delay=0,
                connect=dialer,
            )
            original_send = socket.send

            async def send_then_stop(data: str) -> None:
                await original_send(data)
                if json.loads(data)["type"] == "join_proposal":
                    sent = await client.send_field_update("mission", "", "Help kids")
                    self.assertTrue(sent)
                    await client.stop()

            socket.send = send_then_stop
            await client.run()
            return client.is_connected

        self.assertFalse(asyncio.run(scenario()))
        self.assertTrue(socket.closed)
        self.assertEqual(dialer.attempts, 1)
        self.assertEqual(
            socket.sent,
            [
                {"type": "join_proposal", "proposalId": 42, "userId": 3},
                {"type": "field_update", "field": "mission", "oldValue": "", "newValue": "Help kids"},
            ],
        )


if __name__ == "__main__":
    unittest.main()
