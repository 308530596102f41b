"""Convergence check: mark a subject fully registered once its tasks are resolved."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from app.application.dtos.registration import ConvergenceResult
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IProfileStore,
        IRegistrationTaskStore,
    )

logger = logging.getLogger(__name__)


class ConvergenceChecker:
    """Transitions a subject to fully_registered when its tasks have converged.

    Converged means the subject has at least one task and none is pending or
    in progress; a subject with no tasks yet (processed before enqueue) stays
    where it is. By default a task that permanently failed does not block
    convergence (best-effort onboarding); requires_all_completed=True makes
    any failed task block it instead.
    The profile write is write-if-changed, so repeated checks are no-ops and
    registration_completed_at is stamped once.
    """

    def __init__(
        self,
        task_store: IRegistrationTaskStore,
        profile_store: IProfileStore,
        *,
        requires_all_completed: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._profile_store = profile_store
        self._requires_all_completed = requires_all_completed
        self._clock = clock

    async def check(self, subject_id: str) -> ConvergenceResult:
        pending = await self._task_store.count_pending(subject_id)
        if pending > 0:
            logger.debug("Subject %s has %d unresolved tasks", subject_id, pending)
            return ConvergenceResult(
                subject_id=subject_id,
                pending_tasks=pending,
                converged=False,
                status_changed=False,
            )

        if await self._task_store.count_tasks(subject_id) == 0:
            logger.debug("Subject %s has no registration tasks; nothing to converge", subject_id)
            return ConvergenceResult(
                subject_id=subject_id,
                pending_tasks=0,
                converged=False,
                status_changed=False,
            )

        if self._requires_all_completed:
            failed = await self._task_store.count_failed(subject_id)
            if failed > 0:
                logger.info(
                    "Subject %s has %d permanently failed tasks; not marking fully registered",
                    subject_id,
                    failed,
                )
                return ConvergenceResult(
                    subject_id=subject_id,
                    pending_tasks=0,
                    converged=False,
                    status_changed=False,
                )

        changed = await self._profile_store.mark_fully_registered(subject_id, self._clock())
        if changed:
            logger.info("Registration completed for subject %s", subject_id)
        return ConvergenceResult(
            subject_id=subject_id,
            pending_tasks=0,
            converged=True,
            status_changed=changed,
        )
