"""add profile and professional_details tables

Revision ID: 3f9a1c7d2b10
Revises:
Create Date: 2026-03-02

Profile carries the registration_status the orchestrator converges to
fully_registered. professional_details is written by the
setup_professional_profile task.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "3f9a1c7d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profile",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=True),
        sa.Column(
            "registration_status",
            sa.String(length=32),
            nullable=False,
            server_default="payment_pending",
        ),
        sa.Column("registration_completed_at", sa.DateTime(timezone=True), nullable=True),
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
        sa.CheckConstraint(
            "registration_status IN ('payment_pending', 'payment_complete', "
            "'care_team_assigned', 'profile_complete', 'notifications_sent', "
            "'fully_registered')",
            name="ck_profile_registration_status",
        ),
    )
    op.create_index("ix_profile_email", "profile", ["email"], unique=False)
    op.create_index("ix_profile_role", "profile", ["role"], unique=False)

    op.create_table(
        "professional_details",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
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
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("professional_details")
    op.drop_index("ix_profile_role", table_name="profile")
    op.drop_index("ix_profile_email", table_name="profile")
    op.drop_table("profile")
