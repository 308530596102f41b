"""Trigger surface: process a subject's registration tasks and check convergence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from app.application.dtos.registration import RegistrationRunResult
from app.domain.exceptions import ValidationException
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid
from app.shared.utils.identifiers import is_valid_subject_id_format

if TYPE_CHECKING:
    from app.application.interfaces.repositories import ISubjectLeaseStore
    from app.application.use_cases.registration.convergence import ConvergenceChecker
    from app.application.use_cases.registration.task_runner import (
        RegistrationTaskRunner,
    )

logger = logging.getLogger(__name__)

DEFAULT_LEASE_TTL_SECONDS = 300

RUN_STATUS_PROCESSED = "processed"
RUN_STATUS_NO_PENDING = "no_pending_tasks"
RUN_STATUS_LOCKED = "locked"


def validate_subject_id(subject_id: str | None) -> str:
    """Return the stripped subject id or raise ValidationException."""
    value = (subject_id or "").strip()
    if not value:
        raise ValidationException("Subject ID is required", field="subject_id")
    if not is_valid_subject_id_format(value):
        raise ValidationException("Subject ID has an invalid format", field="subject_id")
    return value


class ProcessRegistrationTasksUseCase:
    """Entry point invoked after payment completion, on manual resync, or by the retry sweep.

    Holds the subject's lease for the whole run so two triggers for the same
    subject never process its tasks at the same time; the loser returns a
    'locked' summary without touching any task. Partial task failure is
    reported in the summary, never raised.
    """

    def __init__(
        self,
        runner: RegistrationTaskRunner,
        convergence_checker: ConvergenceChecker,
        lease_store: ISubjectLeaseStore,
        *,
        lease_ttl_seconds: int = DEFAULT_LEASE_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        owner_factory: Callable[[], str] = generate_cuid,
    ) -> None:
        self._runner = runner
        self._convergence_checker = convergence_checker
        self._lease_store = lease_store
        self._lease_ttl_seconds = lease_ttl_seconds
        self._clock = clock
        self._owner_factory = owner_factory

    @traced("registration.process")
    async def execute(
        self, subject_id: str | None, *, due_only: bool = False
    ) -> RegistrationRunResult:
        """Run pending tasks for subject, then the convergence check.

        Args:
            subject_id: Subject to process (validated; ValidationException if missing/invalid).
            due_only: Only run tasks whose backoff has elapsed (retry sweep).

        Returns:
            RegistrationRunResult with counts and per-task detail.
        """
        subject_id = validate_subject_id(subject_id)
        owner = self._owner_factory()
        if not await self._lease_store.acquire(subject_id, owner, self._lease_ttl_seconds):
            logger.info("Subject %s is being processed by another runner; skipping", subject_id)
            return RegistrationRunResult(
                subject_id=subject_id,
                status=RUN_STATUS_LOCKED,
                processed_tasks=0,
                successful_tasks=0,
                failed_tasks=0,
                skipped_tasks=0,
                registration_completed=False,
            )

        try:
            logger.info("Processing registration tasks for subject %s", subject_id)
            due_before = self._clock() if due_only else None
            summary = await self._runner.run(subject_id, due_before=due_before)
            convergence = await self._convergence_checker.check(subject_id)
        finally:
            await self._lease_store.release(subject_id, owner)

        attempted = summary.processed or summary.skipped_task_ids
        return RegistrationRunResult(
            subject_id=subject_id,
            status=RUN_STATUS_PROCESSED if attempted else RUN_STATUS_NO_PENDING,
            processed_tasks=summary.processed,
            successful_tasks=summary.succeeded,
            failed_tasks=summary.failed,
            skipped_tasks=len(summary.skipped_task_ids),
            registration_completed=convergence.converged,
            task_results=summary.outcomes,
        )
