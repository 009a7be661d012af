"""election timeline, catalog, voters, ballots, audit

Revision ID: 0001_initial
Revises:
Create Date: 2025-10-01 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "election_stages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("stage_name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False, server_default="other"),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_election_stages_category", "election_stages", ["category"])
    op.create_index("ix_election_stages_start_time", "election_stages", ["start_time"])

    op.create_table(
        "voters",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("matric", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("voted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("issuance_token", sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_voters_matric", "voters", ["matric"], unique=True)
    op.create_index("ix_voters_email", "voters", ["email"])
    op.create_index("ix_voters_voted", "voters", ["voted"])

    op.create_table(
        "positions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("vote_type", sa.String(length=20), nullable=False, server_default="single"),
        sa.Column("max_selections", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("max_selections >= 1", name="ck_positions_max_selections"),
    )

    op.create_table(
        "candidates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=100), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("vote_count >= 0", name="ck_candidates_vote_count"),
    )
    op.create_index("ix_candidates_position", "candidates", ["position"])

    op.create_table(
        "issuance_log",
        sa.Column("token", sa.String(length=64), primary_key=True),
        sa.Column("voter_id", sa.String(length=36), sa.ForeignKey("voters.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_issuance_log_voter_id", "issuance_log", ["voter_id"])

    op.create_table(
        "votes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("issuance_token", sa.String(length=64), sa.ForeignKey("issuance_log.token"), nullable=False),
        sa.Column("candidate_id", sa.String(length=36), sa.ForeignKey("candidates.id"), nullable=False),
        sa.Column("position", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_votes_issuance_token", "votes", ["issuance_token"])
    op.create_index("ix_votes_candidate_id", "votes", ["candidate_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_log_event_type", "audit_log", ["event_type"])
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])

    op.create_table(
        "reconciliation_queue",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("voter_id", sa.String(length=36), sa.ForeignKey("voters.id"), nullable=False),
        sa.Column("reason", sa.String(length=100), nullable=False),
        sa.Column("detail", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reconciliation_queue_voter_id", "reconciliation_queue", ["voter_id"])
    op.create_index("ix_reconciliation_queue_status", "reconciliation_queue", ["status"])


def downgrade() -> None:
    op.drop_table("reconciliation_queue")
    op.drop_table("audit_log")
    op.drop_table("votes")
    op.drop_table("issuance_log")
    op.drop_table("candidates")
    op.drop_table("positions")
    op.drop_table("voters")
    op.drop_table("election_stages")
