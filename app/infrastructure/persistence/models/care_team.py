"""Care team ORM models: default care team, patient assignment, and chat room."""

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidTimestampModel


class DefaultCareTeam(CuidTimestampModel, Base):
    """Care team assigned to new patients when no matching runs. Table: default_care_team."""

    __tablename__ = "default_care_team"

    doctor_id: Mapped[str] = mapped_column(String, nullable=False)
    nutritionist_id: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )

    __table_args__ = (Index("ix_default_care_team_active", "is_active"),)


class CareTeamAssignment(CuidTimestampModel, Base):
    """A patient's care team. Table: care_team_assignment. One row per patient."""

    __tablename__ = "care_team_assignment"

    patient_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    doctor_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    nutritionist_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )


class CareTeamRoom(CuidTimestampModel, Base):
    """Care-team chat room for a patient. Table: care_team_room. One room per patient."""

    __tablename__ = "care_team_room"

    patient_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class CareTeamRoomMember(CuidTimestampModel, Base):
    """Member of a care-team room. Table: care_team_room_member."""

    __tablename__ = "care_team_room_member"

    room_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("care_team_room.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    member_role: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_care_team_room_member"),
    )
