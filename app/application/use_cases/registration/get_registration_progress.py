"""Admin diagnostic view of a subject's registration progress."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from app.application.dtos.registration import RegistrationProgress
from app.application.use_cases.registration.process_registration_tasks import (
    validate_subject_id,
)
from app.domain.enums import TaskStatus
from app.domain.exceptions import ResourceNotFoundException

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IProfileStore,
        IRegistrationTaskStore,
    )


class GetRegistrationProgressUseCase:
    """Returns the subject's registration status and every task row (including errors)."""

    def __init__(
        self, task_store: IRegistrationTaskStore, profile_store: IProfileStore
    ) -> None:
        self._task_store = task_store
        self._profile_store = profile_store

    async def execute(self, subject_id: str | None) -> RegistrationProgress:
        subject_id = validate_subject_id(subject_id)
        profile = await self._profile_store.get_profile(subject_id)
        tasks = await self._task_store.list_tasks(subject_id)
        if profile is None and not tasks:
            raise ResourceNotFoundException("profile", subject_id)

        counts = Counter(t.status.value for t in tasks)
        return RegistrationProgress(
            subject_id=subject_id,
            registration_status=profile.registration_status if profile else None,
            registration_completed_at=profile.registration_completed_at if profile else None,
            counts_by_status={s: counts.get(s, 0) for s in TaskStatus.values()},
            tasks=tuple(tasks),
        )
