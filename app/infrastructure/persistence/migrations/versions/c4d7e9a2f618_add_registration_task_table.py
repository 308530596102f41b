"""add registration_task table

Revision ID: c4d7e9a2f618
Revises: 8b2e4d6f1a35
Create Date: 2026-03-02

Durable post-registration queue: one row per (subject, task type). The
(status, next_retry_at) index serves the retry sweep.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "c4d7e9a2f618"
down_revision: Union[str, Sequence[str], None] = "8b2e4d6f1a35"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "registration_task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("task_type", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "next_retry_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("error_details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("result_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "subject_id", "task_type", name="uq_registration_task_subject_type"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'failed')",
            name="ck_registration_task_status",
        ),
        sa.CheckConstraint("retry_count >= 0", name="ck_registration_task_retry_count"),
    )
    op.create_index(
        "ix_registration_task_subject_id", "registration_task", ["subject_id"], unique=False
    )
    op.create_index(
        "ix_registration_task_subject_status",
        "registration_task",
        ["subject_id", "status"],
        unique=False,
    )
    op.create_index(
        "ix_registration_task_status_next_retry",
        "registration_task",
        ["status", "next_retry_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_registration_task_status_next_retry", table_name="registration_task")
    op.drop_index("ix_registration_task_subject_status", table_name="registration_task")
    op.drop_index("ix_registration_task_subject_id", table_name="registration_task")
    op.drop_table("registration_task")
