"""HTTP and WebSocket tests against the FastAPI application."""

from __future__ import annotations

import os
import unittest

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.collaboration.protocol import SessionProtocol
from app.collaboration.registry import SessionRegistry
from app.db.dependencies import get_db
from app.main import app
from app.models.base import Base
from app.models.collaborator import Collaborator
from app.models.proposal import GrantProposal
from app.models.proposal_update import ProposalUpdate

FORM = {
    "organizationName": "Northside Youth Alliance",
    "projectTitle": "Homework Club",
    "mission": "Help every teenager in Northside finish school.",
    "description": "A free after-school tutoring space with trained volunteers.",
    "targetPopulation": "Secondary school students in Northside",
    "amount": "40000",
    "timeline": "12 months",
    "goals": "Raise graduation rates by ten percent.",
}


class ApiRealtimeTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

        def _override_get_db():
            db = cls.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _override_get_db

    @classmethod
    def tearDownClass(cls) -> None:
        app.dependency_overrides.pop(get_db, None)
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        db: Session = self.SessionLocal()
        db.execute(delete(ProposalUpdate))
        db.execute(delete(Collaborator))
        db.execute(delete(GrantProposal))
        db.commit()
        db.close()

    def _client(self) -> TestClient:
        return TestClient(app)

    def _use_test_protocol(self, client: TestClient) -> None:
        client.app.state.session_protocol = SessionProtocol(SessionRegistry(), self.SessionLocal)

    def _create(self, client: TestClient) -> dict:
        response = client.post("/api/grant-proposals", json=FORM)
        self.assertEqual(response.status_code, 201)
        return response.json()["data"]

    def test_proposal_crud_round_trip(self) -> None:
        with self._client() as client:
            created = self._create(client)
            self.assertEqual(created["status"], "draft")
            self.assertFalse(created["isPublic"])
            self.assertTrue(created["shareToken"])

            fetched = client.get(f"/api/grant-proposals/{created['id']}").json()["data"]
            self.assertEqual(fetched["projectTitle"], "Homework Club")

            updated = client.put(
                f"/api/grant-proposals/{created['id']}",
                json={"projectTitle": "Homework Club Plus", "status": "completed"},
            ).json()["data"]
            self.assertEqual(updated["projectTitle"], "Homework Club Plus")
            self.assertEqual(updated["status"], "completed")
            self.assertEqual(updated["mission"], FORM["mission"])

            self.assertEqual(client.delete(f"/api/grant-proposals/{created['id']}").status_code, 200)
            self.assertEqual(client.get(f"/api/grant-proposals/{created['id']}").status_code, 404)
            self.assertEqual(client.delete(f"/api/grant-proposals/{created['id']}").status_code, 404)
            self.assertEqual(client.get("/api/grant-proposals").json(), {"data": []})

    def test_invalid_form_returns_field_level_errors(self) -> None:
        with self._client() as client:
            response = client.post("/api/grant-proposals", json={**FORM, "mission": "short"})

        self.assertEqual(response.status_code, 422)
        locations = [error["loc"] for error in response.json()["detail"]]
        self.assertIn(["body", "mission"], locations)

    def test_generate_for_stored_proposal_without_api_key_uses_synthesis(self) -> None:
        with self._client() as client:
            created = self._create(client)
            response = client.post(f"/api/grant-proposals/{created['id']}/generate")

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "generated")
        self.assertTrue(data["generatedProposal"].startswith("# Grant Proposal: Homework Club"))

    def test_generate_from_form_does_not_store(self) -> None:
        with self._client() as client:
            response = client.post("/api/generate-proposal", json=FORM)

        self.assertEqual(response.status_code, 200)
        self.assertIn("## Budget Justification", response.json()["data"]["generatedProposal"])

    def test_share_token_lookup_includes_roster(self) -> None:
        with self._client() as client:
            self._use_test_protocol(client)
            created = self._create(client)
            client.post(f"/api/proposals/{created['id']}/collaborators", json={"guestName": "Alice"})

            shared = client.get(f"/api/proposals/shared/{created['shareToken']}")
            missing = client.get("/api/proposals/shared/not-a-token")

        self.assertEqual(shared.status_code, 200)
        self.assertEqual(shared.json()["data"]["proposal"]["id"], created["id"])
        self.assertEqual([c["guestName"] for c in shared.json()["data"]["collaborators"]], ["Alice"])
        self.assertEqual(missing.status_code, 404)

    def test_collaborator_routes_require_identity_and_support_leave(self) -> None:
        with self._client() as client:
            self._use_test_protocol(client)
            created = self._create(client)
            base = f"/api/proposals/{created['id']}/collaborators"

            self.assertEqual(client.post(base, json={"role": "viewer"}).status_code, 422)
            client.post(base, json={"userId": 5, "role": "owner"})
            client.post(base, json={"userId": 5, "role": "owner"})
            self.assertEqual(len(client.get(base).json()["data"]), 1)

            left = client.request("DELETE", base, json={"userId": 5})
            again = client.request("DELETE", base, json={"userId": 5})

        self.assertTrue(left.json()["data"]["removed"])
        self.assertFalse(again.json()["data"]["removed"])

    def test_websocket_join_edit_and_update_log(self) -> None:
        with self._client() as client:
            self._use_test_protocol(client)
            proposal_id = self._create(client)["id"]

            with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
                alice.send_json({"type": "join_proposal", "proposalId": proposal_id, "guestName": "Alice"})
                alice_roster = alice.receive_json()
                bob.send_json({"type": "join_proposal", "proposalId": proposal_id, "guestName": "Bob"})
                bob_roster = bob.receive_json()

                alice.send_text("this is not json")
                alice.send_json({"type": "field_update", "field": "mission", "oldValue": "", "newValue": "Help kids"})
                changed = bob.receive_json()

            updates = client.get(f"/api/proposals/{proposal_id}/updates").json()["data"]

        self.assertEqual(alice_roster["type"], "collaborators_update")
        self.assertEqual([c["guestName"] for c in alice_roster["collaborators"]], ["Alice"])
        self.assertEqual([c["guestName"] for c in bob_roster["collaborators"]], ["Alice", "Bob"])
        self.assertEqual(
            changed,
            {"type": "field_changed", "field": "mission", "value": "Help kids", "updatedBy": "Alice"},
        )
        self.assertEqual(len(updates), 1)
        self.assertEqual(updates[0]["newValue"], "Help kids")
        self.assertEqual(updates[0]["guestName"], "Alice")

    def test_rest_invite_is_announced_on_the_socket(self) -> None:
        with self._client() as client:
            self._use_test_protocol(client)
            proposal_id = self._create(client)["id"]

            with client.websocket_connect("/ws") as alice:
                alice.send_json({"type": "join_proposal", "proposalId": proposal_id, "guestName": "Alice"})
                alice.receive_json()
                client.post(f"/api/proposals/{proposal_id}/collaborators", json={"guestName": "Dana", "role": "viewer"})
                announced = alice.receive_json()

        self.assertEqual(announced["type"], "collaborator_joined")
        self.assertEqual(announced["collaborator"]["guestName"], "Dana")
        self.assertEqual(announced["collaborator"]["role"], "viewer")

    def test_updates_endpoint_honours_limit(self) -> None:
        with self._client() as client:
            self._use_test_protocol(client)
            proposal_id = self._create(client)["id"]
            with client.websocket_connect("/ws") as editor, client.websocket_connect("/ws") as watcher:
                editor.send_json({"type": "join_proposal", "proposalId": proposal_id, "userId": 1})
                editor.receive_json()
                watcher.send_json({"type": "join_proposal", "proposalId": proposal_id, "guestName": "W"})
                watcher.receive_json()
                for index in range(3):
                    editor.send_json({"type": "field_update", "field": "goals", "oldValue": "", "newValue": str(index)})
                    self.assertEqual(watcher.receive_json()["updatedBy"], "User 1")

            limited = client.get(f"/api/proposals/{proposal_id}/updates", params={"limit": 2}).json()["data"]
            rejected = client.get(f"/api/proposals/{proposal_id}/updates", params={"limit": 0})

        self.assertEqual([row["newValue"] for row in limited], ["2", "1"])
        self.assertEqual(rejected.status_code, 422)


if __name__ == "__main__":
    unittest.main()
