"""Per-subject processing lease backed by PostgreSQL (upsert guarded on expiry)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.infrastructure.persistence.models.subject_lease import SubjectLease
from app.shared.utils.datetime import utc_now


class SubjectLeaseRepository:
    """Subject lease store. Implements ISubjectLeaseStore.

    acquire inserts the lease row, or takes over an existing one only when it
    has expired; the RETURNING owner tells whether this caller now holds it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def acquire(self, subject_id: str, owner: str, ttl_seconds: int) -> bool:
        now = self._clock()
        stmt = insert(SubjectLease).values(
            subject_id=subject_id,
            owner=owner,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["subject_id"],
            set_={"owner": stmt.excluded.owner, "expires_at": stmt.excluded.expires_at},
            where=SubjectLease.expires_at < now,
        ).returning(SubjectLease.owner)
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none() == owner

    async def release(self, subject_id: str, owner: str) -> None:
        stmt = delete(SubjectLease).where(
            SubjectLease.subject_id == subject_id, SubjectLease.owner == owner
        )
        async with self._session_factory.begin() as session:
            await session.execute(stmt)
