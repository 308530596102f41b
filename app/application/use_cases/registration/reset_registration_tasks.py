"""Operator reset of stuck and failed registration tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from app.application.dtos.registration import ResetResult
from app.application.use_cases.registration.process_registration_tasks import (
    validate_subject_id,
)
from app.domain.enums import RegistrationStatus
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IProfileStore,
        IRegistrationTaskStore,
    )
    from app.application.use_cases.registration.process_registration_tasks import (
        ProcessRegistrationTasksUseCase,
    )

logger = logging.getLogger(__name__)

DEFAULT_STUCK_AFTER_SECONDS = 900


class ResetRegistrationTasksUseCase:
    """Puts a subject's tasks back in the queue and optionally re-triggers processing.

    - Stuck tasks (in_progress and not updated for stuck_after_seconds, i.e. a
      runner crashed mid-task) go back to pending; their retry_count is kept.
    - Failed tasks go back to pending with retry_count reset to 0. This is the
      only path that resets a retry count. When a failed task is reset on a
      subject that had already converged, its registration status returns to
      payment_complete so the next convergence check can fire again. Any
      other status is left as it is.
    """

    def __init__(
        self,
        task_store: IRegistrationTaskStore,
        profile_store: IProfileStore,
        process_use_case: ProcessRegistrationTasksUseCase,
        *,
        stuck_after_seconds: int = DEFAULT_STUCK_AFTER_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._profile_store = profile_store
        self._process_use_case = process_use_case
        self._stuck_after = timedelta(seconds=stuck_after_seconds)
        self._clock = clock

    async def execute(
        self,
        subject_id: str | None,
        *,
        reset_stuck: bool = True,
        reset_failed: bool = False,
        trigger: bool = True,
    ) -> ResetResult:
        subject_id = validate_subject_id(subject_id)

        stuck_count = 0
        if reset_stuck:
            stale_before = self._clock() - self._stuck_after
            stuck_count = await self._task_store.reset_stuck_tasks(subject_id, stale_before)
            logger.info("Reset %d stuck tasks for subject %s", stuck_count, subject_id)

        failed_count = 0
        if reset_failed:
            failed_count = await self._task_store.reset_failed_tasks(subject_id)
            logger.info("Reset %d failed tasks for subject %s", failed_count, subject_id)
            if failed_count:
                await self._reopen_if_converged(subject_id)

        run = await self._process_use_case.execute(subject_id) if trigger else None
        return ResetResult(
            subject_id=subject_id,
            stuck_tasks_reset=stuck_count,
            failed_tasks_reset=failed_count,
            run=run,
        )

    async def _reopen_if_converged(self, subject_id: str) -> None:
        profile = await self._profile_store.get_profile(subject_id)
        if profile is None or profile.registration_status is not RegistrationStatus.FULLY_REGISTERED:
            return
        await self._profile_store.set_registration_status(
            subject_id, RegistrationStatus.PAYMENT_COMPLETE
        )
        logger.info("Reopened registration for subject %s", subject_id)
