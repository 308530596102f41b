"""Care team chat room provisioning backed by PostgreSQL."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.care_team import CareTeamRoom
from app.domain.enums import TaskType, UserRole
from app.domain.exceptions import PrerequisiteNotMetException
from app.infrastructure.persistence.models.care_team import (
    CareTeamAssignment,
    CareTeamRoom as CareTeamRoomModel,
    CareTeamRoomMember,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

CARE_TEAM_ROOM_NAME = "Care Team"


class SqlRoomProvisioningService:
    """IRoomProvisioningService implementation writing care_team_room rows.

    One room per patient (unique patient_id). Members are the patient and the
    assigned doctor and nutritionist; re-running adds only missing members.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_or_create_care_team_room(self, patient_id: str) -> CareTeamRoom:
        async with self._session_factory.begin() as session:
            assignment = (
                await session.execute(
                    select(CareTeamAssignment).where(
                        CareTeamAssignment.patient_id == patient_id
                    )
                )
            ).scalar_one_or_none()
            if assignment is None:
                raise PrerequisiteNotMetException(
                    TaskType.CREATE_CHAT_ROOM.value, patient_id, "no care team assignment found"
                )

            inserted = await session.execute(
                insert(CareTeamRoomModel)
                .values(id=generate_cuid(), patient_id=patient_id, name=CARE_TEAM_ROOM_NAME)
                .on_conflict_do_nothing(index_elements=["patient_id"])
                .returning(CareTeamRoomModel.id)
            )
            room_id = inserted.scalar_one_or_none()
            created = room_id is not None
            if room_id is None:
                room_id = (
                    await session.execute(
                        select(CareTeamRoomModel.id).where(
                            CareTeamRoomModel.patient_id == patient_id
                        )
                    )
                ).scalar_one()

            members = [
                (patient_id, UserRole.PATIENT.value),
                (assignment.doctor_id, UserRole.DOCTOR.value),
            ]
            if assignment.nutritionist_id:
                members.append((assignment.nutritionist_id, UserRole.NUTRITIONIST.value))
            await session.execute(
                insert(CareTeamRoomMember)
                .values(
                    [
                        {
                            "id": generate_cuid(),
                            "room_id": room_id,
                            "user_id": user_id,
                            "member_role": member_role,
                        }
                        for user_id, member_role in members
                    ]
                )
                .on_conflict_do_nothing(index_elements=["room_id", "user_id"])
            )

        if created:
            logger.info("Created care team room %s for patient %s", room_id, patient_id)
        return CareTeamRoom(room_id=room_id, patient_id=patient_id, created=created)
