"""Care team store backed by PostgreSQL: default care team and patient assignments."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.care_team import CareTeamAssignment, DefaultCareTeamConfig
from app.domain.exceptions import CareTeamAssignmentException
from app.infrastructure.persistence.models.care_team import (
    CareTeamAssignment as CareTeamAssignmentModel,
    DefaultCareTeam,
)
from app.shared.utils.generators import generate_cuid


def _to_result(a: CareTeamAssignmentModel) -> CareTeamAssignment:
    """Map CareTeamAssignment ORM to DTO."""
    return CareTeamAssignment(
        id=a.id,
        patient_id=a.patient_id,
        doctor_id=a.doctor_id,
        nutritionist_id=a.nutritionist_id,
    )


class CareTeamRepository:
    """Care team store. Implements ICareTeamStore."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_assignment(self, patient_id: str) -> CareTeamAssignment | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CareTeamAssignmentModel).where(
                    CareTeamAssignmentModel.patient_id == patient_id
                )
            )
            row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def create_assignment(
        self, patient_id: str, doctor_id: str, nutritionist_id: str | None = None
    ) -> CareTeamAssignment:
        """Insert the assignment; a concurrent or earlier insert wins and is returned instead."""
        stmt = (
            insert(CareTeamAssignmentModel)
            .values(
                id=generate_cuid(),
                patient_id=patient_id,
                doctor_id=doctor_id,
                nutritionist_id=nutritionist_id,
            )
            .on_conflict_do_nothing(index_elements=["patient_id"])
        )
        async with self._session_factory.begin() as session:
            await session.execute(stmt)
            result = await session.execute(
                select(CareTeamAssignmentModel).where(
                    CareTeamAssignmentModel.patient_id == patient_id
                )
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise CareTeamAssignmentException(patient_id, "assignment not visible after insert")
        return _to_result(row)

    async def get_default_care_team_config(self) -> DefaultCareTeamConfig | None:
        stmt = (
            select(DefaultCareTeam)
            .where(DefaultCareTeam.is_active.is_(True))
            .order_by(DefaultCareTeam.created_at.desc())
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return DefaultCareTeamConfig(
            doctor_id=row.doctor_id, nutritionist_id=row.nutritionist_id
        )
