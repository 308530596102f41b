"""add care team tables

Revision ID: 8b2e4d6f1a35
Revises: 3f9a1c7d2b10
Create Date: 2026-03-02

default_care_team (config used by assign_care_team), care_team_assignment
(one per patient), care_team_room and its members (create_chat_room).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "8b2e4d6f1a35"
down_revision: Union[str, Sequence[str], None] = "3f9a1c7d2b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    op.create_table(
        "default_care_team",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("doctor_id", sa.String(), nullable=False),
        sa.Column("nutritionist_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_default_care_team_active", "default_care_team", ["is_active"], unique=False
    )

    op.create_table(
        "care_team_assignment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("patient_id", sa.String(), nullable=False),
        sa.Column("doctor_id", sa.String(), nullable=False),
        sa.Column("nutritionist_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("patient_id"),
    )
    op.create_index(
        "ix_care_team_assignment_doctor_id",
        "care_team_assignment",
        ["doctor_id"],
        unique=False,
    )
    op.create_index(
        "ix_care_team_assignment_nutritionist_id",
        "care_team_assignment",
        ["nutritionist_id"],
        unique=False,
    )

    op.create_table(
        "care_team_room",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("patient_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("patient_id"),
    )

    op.create_table(
        "care_team_room_member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("room_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("member_role", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["room_id"], ["care_team_room.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("room_id", "user_id", name="uq_care_team_room_member"),
    )
    op.create_index(
        "ix_care_team_room_member_room_id",
        "care_team_room_member",
        ["room_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_care_team_room_member_room_id", table_name="care_team_room_member")
    op.drop_table("care_team_room_member")
    op.drop_table("care_team_room")
    op.drop_index(
        "ix_care_team_assignment_nutritionist_id", table_name="care_team_assignment"
    )
    op.drop_index("ix_care_team_assignment_doctor_id", table_name="care_team_assignment")
    op.drop_table("care_team_assignment")
    op.drop_index("ix_default_care_team_active", table_name="default_care_team")
    op.drop_table("default_care_team")
