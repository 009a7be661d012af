"""aspirant applications; one issuance row per voter

Revision ID: 0002_aspirants
Revises: 0001_initial
Create Date: 2025-10-20 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_aspirants"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "aspirants",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("matric", sa.String(length=20), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=100), nullable=False),
        sa.Column("cgpa", sa.Float(), nullable=True),
        sa.Column("why_running", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="submitted"),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("candidate_id", sa.String(length=36), sa.ForeignKey("candidates.id"), nullable=True),
        sa.Column("promoted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_aspirants_matric", "aspirants", ["matric"], unique=True)
    op.create_index("ix_aspirants_position", "aspirants", ["position"])
    op.create_index("ix_aspirants_status", "aspirants", ["status"])

    op.drop_index("ix_issuance_log_voter_id", table_name="issuance_log")
    op.create_index("ix_issuance_log_voter_id", "issuance_log", ["voter_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_issuance_log_voter_id", table_name="issuance_log")
    op.create_index("ix_issuance_log_voter_id", "issuance_log", ["voter_id"])

    op.drop_index("ix_aspirants_status", table_name="aspirants")
    op.drop_index("ix_aspirants_position", table_name="aspirants")
    op.drop_index("ix_aspirants_matric", table_name="aspirants")
    op.drop_table("aspirants")
