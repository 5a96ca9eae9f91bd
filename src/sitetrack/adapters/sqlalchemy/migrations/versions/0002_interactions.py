"""Add sales-log interactions and the latest interaction on companies and contacts.

Revision ID: 0002
Revises: 0001
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

_COLUMNS = ("interaction_type", "occurred_on", "last_interaction_on", "last_interaction_type")


def upgrade() -> None:
    with op.batch_alter_table("tracked_entity") as batch_op:
        batch_op.add_column(sa.Column("interaction_type", sa.String(length=16), nullable=True))
        batch_op.add_column(sa.Column("occurred_on", sa.Date(), nullable=True))
        batch_op.add_column(sa.Column("last_interaction_on", sa.Date(), nullable=True))
        batch_op.add_column(
            sa.Column("last_interaction_type", sa.String(length=16), nullable=True)
        )


def downgrade() -> None:
    with op.batch_alter_table("tracked_entity") as batch_op:
        for name in reversed(_COLUMNS):
            batch_op.drop_column(name)
