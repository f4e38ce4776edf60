"""initial collaboration schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "grant_proposals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("organization_name", sa.String(length=255), nullable=False),
        sa.Column("project_title", sa.String(length=255), nullable=False),
        sa.Column("mission", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("target_population", sa.Text(), nullable=False),
        sa.Column("amount", sa.String(length=64), nullable=False),
        sa.Column("timeline", sa.String(length=255), nullable=False),
        sa.Column("goals", sa.Text(), nullable=False),
        sa.Column("generated_proposal", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("share_token", sa.String(length=64), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_grant_proposals_share_token", "grant_proposals", ["share_token"], unique=True)

    op.create_table(
        "collaborators",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("proposal_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("guest_name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="editor"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_collaborators_proposal_id", "collaborators", ["proposal_id"], unique=False)

    op.create_table(
        "proposal_updates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("proposal_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("guest_name", sa.String(length=255), nullable=True),
        sa.Column("field", sa.Text(), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_proposal_updates_proposal_id", "proposal_updates", ["proposal_id"], unique=False)
    op.create_index("ix_proposal_updates_timestamp", "proposal_updates", ["timestamp"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_proposal_updates_timestamp", table_name="proposal_updates")
    op.drop_index("ix_proposal_updates_proposal_id", table_name="proposal_updates")
    op.drop_table("proposal_updates")
    op.drop_index("ix_collaborators_proposal_id", table_name="collaborators")
    op.drop_table("collaborators")
    op.drop_index("ix_grant_proposals_share_token", table_name="grant_proposals")
    op.drop_table("grant_proposals")
