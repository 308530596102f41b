"""add subject_lease table

Revision ID: e1f3a5b7c9d2
Revises: c4d7e9a2f618
Create Date: 2026-03-02

Per-subject processing lease; an expired row may be taken over by another runner.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "e1f3a5b7c9d2"
down_revision: Union[str, Sequence[str], None] = "c4d7e9a2f618"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "subject_lease",
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("owner", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("subject_id"),
    )


def downgrade() -> None:
    op.drop_table("subject_lease")
