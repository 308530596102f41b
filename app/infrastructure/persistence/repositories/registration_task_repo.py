"""Registration task store backed by PostgreSQL. Returns application DTOs.

Every method runs in its own short transaction opened from the session factory,
so the task runner can call it from concurrent handler coroutines. State
transitions are single UPDATE statements guarded on the current status (and
retry_count for failures); rowcount tells the caller whether it won.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import and_, func, null, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.registration import RegistrationTaskResult, TaskSpec
from app.domain.enums import TaskStatus
from app.domain.value_objects.retry_policy import RetryPolicy
from app.infrastructure.persistence.models.registration_task import RegistrationTask
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

_UNRESOLVED = [s.value for s in TaskStatus.unresolved()]


def _to_result(t: RegistrationTask) -> RegistrationTaskResult:
    """Map RegistrationTask ORM to RegistrationTaskResult DTO."""
    return RegistrationTaskResult(
        id=t.id,
        subject_id=t.subject_id,
        task_type=t.task_type,
        status=TaskStatus(t.status),
        priority=t.priority,
        retry_count=t.retry_count,
        next_retry_at=ensure_utc(t.next_retry_at),
        error_details=t.error_details,
        result_payload=t.result_payload,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


class RegistrationTaskRepository:
    """Registration task store. Implements IRegistrationTaskStore."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        retry_policy: RetryPolicy | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._retry_policy = retry_policy or RetryPolicy()
        self._clock = clock

    async def list_pending_tasks(
        self, subject_id: str, due_before: datetime | None = None
    ) -> list[RegistrationTaskResult]:
        stmt = select(RegistrationTask).where(
            RegistrationTask.subject_id == subject_id,
            RegistrationTask.status == TaskStatus.PENDING.value,
        )
        if due_before is not None:
            stmt = stmt.where(RegistrationTask.next_retry_at <= due_before)
        stmt = stmt.order_by(
            RegistrationTask.priority.desc(), RegistrationTask.created_at.asc()
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_result(t) for t in result.scalars().all()]

    async def claim_task(self, task_id: str, expected_retry_count: int) -> bool:
        stmt = (
            update(RegistrationTask)
            .where(
                RegistrationTask.id == task_id,
                RegistrationTask.status == TaskStatus.PENDING.value,
                RegistrationTask.retry_count == expected_retry_count,
            )
            .values(status=TaskStatus.IN_PROGRESS.value, updated_at=func.now())
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount == 1

    async def mark_completed(self, task_id: str, result_payload: dict[str, Any]) -> bool:
        stmt = (
            update(RegistrationTask)
            .where(
                RegistrationTask.id == task_id,
                RegistrationTask.status.in_(_UNRESOLVED),
            )
            .values(
                status=TaskStatus.COMPLETED.value,
                result_payload=result_payload,
                error_details=null(),
                updated_at=func.now(),
            )
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount == 1

    async def mark_failed(
        self, task_id: str, error: dict[str, Any], current_retry_count: int
    ) -> bool:
        """Record a failed attempt in one compare-and-swap UPDATE.

        The WHERE clause pins retry_count to current_retry_count so two runners
        recording the same failure cannot both increment it.
        """
        policy = self._retry_policy
        stmt = (
            update(RegistrationTask)
            .where(
                RegistrationTask.id == task_id,
                RegistrationTask.retry_count == current_retry_count,
                RegistrationTask.status.in_(_UNRESOLVED),
            )
            .values(
                retry_count=current_retry_count + 1,
                status=policy.status_after_failure(current_retry_count).value,
                error_details=error,
                next_retry_at=policy.next_retry_at(self._clock(), current_retry_count),
                updated_at=func.now(),
            )
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount == 1

    async def count_pending(self, subject_id: str) -> int:
        return await self._count(subject_id, _UNRESOLVED)

    async def count_failed(self, subject_id: str) -> int:
        return await self._count(subject_id, [TaskStatus.FAILED.value])

    async def count_tasks(self, subject_id: str) -> int:
        return await self._count(subject_id, None)

    async def _count(self, subject_id: str, statuses: list[str] | None) -> int:
        stmt = select(func.count()).where(RegistrationTask.subject_id == subject_id)
        if statuses is not None:
            stmt = stmt.where(RegistrationTask.status.in_(statuses))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def create_tasks(
        self, subject_id: str, specs: Sequence[TaskSpec]
    ) -> list[str]:
        """Insert the given task types; types the subject already has are left as they are."""
        if not specs:
            return []
        rows = [
            {
                "id": generate_cuid(),
                "subject_id": subject_id,
                "task_type": spec.task_type,
                "priority": spec.priority,
            }
            for spec in specs
        ]
        stmt = (
            insert(RegistrationTask)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["subject_id", "task_type"])
            .returning(RegistrationTask.task_type)
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
            created = set(result.scalars().all())
        # Keep the caller's ordering.
        return [spec.task_type for spec in specs if spec.task_type in created]

    async def list_tasks(self, subject_id: str) -> list[RegistrationTaskResult]:
        stmt = (
            select(RegistrationTask)
            .where(RegistrationTask.subject_id == subject_id)
            .order_by(RegistrationTask.priority.desc(), RegistrationTask.created_at.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_result(t) for t in result.scalars().all()]

    async def reset_stuck_tasks(self, subject_id: str, stale_before: datetime) -> int:
        stmt = (
            update(RegistrationTask)
            .where(
                RegistrationTask.subject_id == subject_id,
                RegistrationTask.status == TaskStatus.IN_PROGRESS.value,
                RegistrationTask.updated_at < stale_before,
            )
            .values(status=TaskStatus.PENDING.value, updated_at=func.now())
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        return result.rowcount

    async def reset_failed_tasks(self, subject_id: str) -> int:
        stmt = (
            update(RegistrationTask)
            .where(
                RegistrationTask.subject_id == subject_id,
                RegistrationTask.status == TaskStatus.FAILED.value,
            )
            .values(
                status=TaskStatus.PENDING.value,
                retry_count=0,
                error_details=null(),
                next_retry_at=func.now(),
                updated_at=func.now(),
            )
        )
        async with self._session_factory.begin() as session:
            result = await session.execute(stmt)
        if result.rowcount:
            logger.info("Operator reset %d failed tasks for %s", result.rowcount, subject_id)
        return result.rowcount

    async def list_subjects_with_due_tasks(
        self, now: datetime, limit: int = 100, *, stuck_before: datetime | None = None
    ) -> list[str]:
        due = and_(
            RegistrationTask.status == TaskStatus.PENDING.value,
            RegistrationTask.next_retry_at <= now,
        )
        if stuck_before is not None:
            due = or_(
                due,
                and_(
                    RegistrationTask.status == TaskStatus.IN_PROGRESS.value,
                    RegistrationTask.updated_at < stuck_before,
                ),
            )
        stmt = (
            select(RegistrationTask.subject_id)
            .where(due)
            .group_by(RegistrationTask.subject_id)
            .order_by(func.min(RegistrationTask.next_retry_at).asc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
