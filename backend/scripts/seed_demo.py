"""Seed a demo grant proposal with a roster and a short edit history.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.collaboration.identity import GuestIdentity, RegisteredIdentity
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.schemas.proposal import GrantProposalCreate
from app.services.collaborators import add_collaborator, join_collaborator
from app.services.proposal_updates import append_update
from app.services.proposals import create_proposal


def build_demo_form() -> GrantProposalCreate:
    """Return a deterministic demo form submission."""

    return GrantProposalCreate(
        organization_name="Riverbend Food Bank",
        project_title="Fresh Start Pantry",
        mission="end hunger in the Riverbend valley through dignified access to fresh food",
        description="opening a weekend pantry stocked with produce from local farms",
        target_population="low-income families and seniors living in Riverbend",
        amount="75000",
        timeline="18 months",
        goals="Distribute 30,000 meals and enroll 400 households in nutrition classes.",
    )


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo grant proposal with collaborators and edits.")
    parser.add_argument(
        "--owner-id",
        type=int,
        default=1,
        help="Registered user id recorded as the proposal owner (default: 1)",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        proposal = create_proposal(db, build_demo_form(), user_id=args.owner_id)
        add_collaborator(db, proposal.id, RegisteredIdentity(args.owner_id), role="owner")
        join_collaborator(db, proposal.id, GuestIdentity("Alice"))
        join_collaborator(db, proposal.id, GuestIdentity("Bob"))
        append_update(db, proposal.id, GuestIdentity("Alice"), "timeline", "12 months", "18 months")
        append_update(db, proposal.id, GuestIdentity("Bob"), "amount", "50000", "75000")
        proposal_id = proposal.id
        share_token = proposal.share_token

    print("Seed complete")
    print(f"proposal_id={proposal_id}")
    print(f"share_token={share_token}")
    print()
    print("Inspect:")
    print(f"  GET /api/grant-proposals/{proposal_id}")
    print(f"  GET /api/proposals/shared/{share_token}")
    print(f"  GET /api/proposals/{proposal_id}/collaborators")
    print(f"  GET /api/proposals/{proposal_id}/updates")


if __name__ == "__main__":
    main()
