"""Run a subject's pending registration tasks concurrently with failure isolation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from app.application.dtos.registration import TaskOutcome, TaskRunSummary
from app.domain.exceptions import HandlerTimeoutException, UnknownTaskTypeException
from app.domain.value_objects.task_payloads import TaskErrorDetails, TaskResultPayload
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.dtos.registration import RegistrationTaskResult
    from app.application.interfaces.repositories import IRegistrationTaskStore
    from app.application.interfaces.services import ITaskHandler

logger = logging.getLogger(__name__)

DEFAULT_TASK_TIMEOUT_SECONDS = 30.0


class RegistrationTaskRunner:
    """Executes all pending tasks of a subject as independent coroutines.

    Each task is claimed (pending -> in_progress), run through its handler
    under a timeout, then marked completed or failed. The join is settle-all:
    a failing or hung task never cancels or blocks the outcome of a sibling.
    """

    def __init__(
        self,
        task_store: IRegistrationTaskStore,
        handlers: Mapping[str, ITaskHandler],
        *,
        timeout_seconds: float = DEFAULT_TASK_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._handlers = dict(handlers)
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    @traced("registration.run_tasks")
    async def run(
        self, subject_id: str, *, due_before: datetime | None = None
    ) -> TaskRunSummary:
        """Run every pending task for subject and return the aggregate outcome.

        Args:
            subject_id: Subject whose tasks to run.
            due_before: When set, only tasks whose next_retry_at has passed.

        Returns:
            TaskRunSummary; empty (not an error) when nothing is pending.
        """
        tasks = await self._task_store.list_pending_tasks(subject_id, due_before=due_before)
        if not tasks:
            logger.info("No pending tasks found for subject %s", subject_id)
            return TaskRunSummary(subject_id=subject_id)

        logger.info(
            "Found %d pending tasks for subject %s: %s",
            len(tasks),
            subject_id,
            ", ".join(f"{t.task_type} (retry: {t.retry_count})" for t in tasks),
        )
        results = await asyncio.gather(
            *(self._run_one(subject_id, task) for task in tasks),
            return_exceptions=True,
        )

        outcomes: list[TaskOutcome] = []
        skipped: list[str] = []
        for task, result in zip(tasks, results):
            if isinstance(result, BaseException):
                # Store write failed outside the handler; the row keeps its last persisted state.
                logger.error(
                    "Task %s (%s) for subject %s could not be recorded: %s",
                    task.id,
                    task.task_type,
                    subject_id,
                    result,
                    exc_info=result,
                )
                outcomes.append(
                    TaskOutcome(
                        task_id=task.id,
                        task_type=task.task_type,
                        success=False,
                        error=TaskErrorDetails.from_exception(result, self._clock()).to_dict(),
                    )
                )
            elif result is None:
                skipped.append(task.id)
            else:
                outcomes.append(result)

        summary = TaskRunSummary(
            subject_id=subject_id,
            outcomes=tuple(outcomes),
            skipped_task_ids=tuple(skipped),
        )
        add_span_attributes(
            tasks_processed=summary.processed,
            tasks_succeeded=summary.succeeded,
            tasks_failed=summary.failed,
        )
        logger.info(
            "Task processing summary for subject %s: %d/%d successful, %d failed, %d skipped",
            subject_id,
            summary.succeeded,
            summary.processed,
            summary.failed,
            len(skipped),
        )
        return summary

    async def _run_one(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskOutcome | None:
        """Claim, execute and record one task. None when another runner holds it."""
        if not await self._task_store.claim_task(task.id, task.retry_count):
            logger.info(
                "Task %s (%s) already claimed by another runner; skipping",
                task.id,
                task.task_type,
            )
            return None

        try:
            payload = await self._execute(subject_id, task)
        except Exception as exc:
            return await self._record_failure(subject_id, task, exc)

        result = payload.to_dict()
        if not await self._task_store.mark_completed(task.id, result):
            logger.warning(
                "Task %s (%s) was resolved concurrently; completion not recorded",
                task.id,
                task.task_type,
            )
        logger.info("Task %s completed for subject %s", task.task_type, subject_id)
        return TaskOutcome(
            task_id=task.id,
            task_type=task.task_type,
            success=True,
            result=result,
        )

    async def _execute(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        handler = self._handlers.get(task.task_type)
        if handler is None:
            raise UnknownTaskTypeException(task.task_type)
        try:
            return await asyncio.wait_for(
                handler.handle(subject_id, task), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise HandlerTimeoutException(task.task_type, self._timeout_seconds) from exc

    async def _record_failure(
        self, subject_id: str, task: RegistrationTaskResult, exc: Exception
    ) -> TaskOutcome:
        error = TaskErrorDetails.from_exception(exc, self._clock()).to_dict()
        logger.warning(
            "Error processing task %s for subject %s (attempt %d): %s",
            task.task_type,
            subject_id,
            task.retry_count + 1,
            error["message"],
        )
        if not await self._task_store.mark_failed(task.id, error, task.retry_count):
            logger.warning(
                "Task %s (%s) changed concurrently; failure not recorded",
                task.id,
                task.task_type,
            )
        return TaskOutcome(
            task_id=task.id,
            task_type=task.task_type,
            success=False,
            error=error,
        )
