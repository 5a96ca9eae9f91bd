"""Create the tracked_entity table.

Revision ID: 0001
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tracked_entity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("family", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("value", sa.Numeric(14, 2), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("contractor", sa.String(), nullable=True),
        sa.Column("owner", sa.String(), nullable=True),
        sa.Column("architect", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("county", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_viewed", sa.Boolean(), nullable=False),
        sa.Column("user_notes", sa.Text(), nullable=False),
        sa.Column("is_favorite", sa.Boolean(), nullable=False),
        sa.Column("temperature", sa.String(length=16), nullable=True),
        sa.Column("is_cold", sa.Boolean(), nullable=False),
        sa.Column("locked_fields", sa.String(), nullable=False),
        sa.Column("dedupe_key", sa.String(), nullable=True),
        sa.Column("name_key", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_imported_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_tracked_entity"),
    )
    op.create_index(
        "ix_tracked_entity_family_external_id", "tracked_entity", ["family", "external_id"]
    )
    op.create_index(
        "ix_tracked_entity_family_dedupe_key", "tracked_entity", ["family", "dedupe_key"]
    )
    op.create_index("ix_tracked_entity_family_name_key", "tracked_entity", ["family", "name_key"])


def downgrade() -> None:
    op.drop_index("ix_tracked_entity_family_name_key", table_name="tracked_entity")
    op.drop_index("ix_tracked_entity_family_dedupe_key", table_name="tracked_entity")
    op.drop_index("ix_tracked_entity_family_external_id", table_name="tracked_entity")
    op.drop_table("tracked_entity")
