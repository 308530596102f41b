"""Profile store backed by PostgreSQL: roles, registration status, professional details."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.care_team import SubjectProfile
from app.domain.enums import RegistrationStatus, UserRole
from app.infrastructure.persistence.models.profile import ProfessionalDetails, Profile
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)


def _parse_role(subject_id: str, value: str | None) -> UserRole | None:
    if value is None:
        return None
    try:
        return UserRole(value)
    except ValueError:
        logger.warning("Profile %s has unrecognized role %r", subject_id, value)
        return None


class ProfileRepository:
    """Profile store. Implements IProfileStore."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_role(self, subject_id: str) -> UserRole | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Profile.role).where(Profile.id == subject_id)
            )
            return _parse_role(subject_id, result.scalar_one_or_none())

    async def get_profile(self, subject_id: str) -> SubjectProfile | None:
        """Return the profile, or None when missing or it has no usable role."""
        async with self._session_factory() as session:
            result = await session.execute(select(Profile).where(Profile.id == subject_id))
            p = result.scalar_one_or_none()
        if p is None:
            return None
        role = _parse_role(subject_id, p.role)
        if role is None:
            return None
        return SubjectProfile(
            id=p.id,
            role=role,
            first_name=p.first_name,
            last_name=p.last_name,
            email=p.email,
            phone=p.phone,
            registration_status=RegistrationStatus(p.registration_status),
            registration_completed_at=ensure_utc(p.registration_completed_at),
        )

    async def mark_fully_registered(self, subject_id: str, completed_at: datetime) -> bool:
        stmt = (
            update(Profile)
            .where(
                Profile.id == subject_id,
                Profile.registration_status != RegistrationStatus.FULLY_REGISTERED.value,
            )
            .values(
                registration_status=RegistrationStatus.FULLY_REGISTERED.value,
                registration_completed_at=completed_at,
            )
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount == 1

    async def set_registration_status(
        self, subject_id: str, status: RegistrationStatus
    ) -> bool:
        values: dict[str, object] = {"registration_status": status.value}
        if status is not RegistrationStatus.FULLY_REGISTERED:
            values["registration_completed_at"] = None
        stmt = update(Profile).where(Profile.id == subject_id).values(**values)
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount == 1

    async def ensure_professional_details(self, subject_id: str, role: UserRole) -> bool:
        stmt = (
            insert(ProfessionalDetails)
            .values(user_id=subject_id, role=role.value)
            .on_conflict_do_nothing(index_elements=["user_id"])
            .returning(ProfessionalDetails.user_id)
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none() is not None
