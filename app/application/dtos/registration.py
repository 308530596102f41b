"""DTOs for registration tasks and orchestration runs (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import RegistrationStatus, TaskStatus


@dataclass(frozen=True)
class RegistrationTaskResult:
    """Registration task read-model as returned by the task store."""

    id: str
    subject_id: str
    task_type: str
    status: TaskStatus
    priority: int
    retry_count: int
    next_retry_at: datetime
    error_details: dict[str, Any] | None
    result_payload: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TaskSpec:
    """Write-model for enqueueing one task."""

    task_type: str
    priority: int = 0


@dataclass(frozen=True)
class TaskOutcome:
    """Per-task result of a run. result/error are the JSON forms persisted on the task."""

    task_id: str
    task_type: str
    success: bool
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None


@dataclass(frozen=True)
class TaskRunSummary:
    """Aggregate outcome of the task runner for one subject."""

    subject_id: str
    outcomes: tuple[TaskOutcome, ...] = ()
    skipped_task_ids: tuple[str, ...] = ()

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)


@dataclass(frozen=True)
class ConvergenceResult:
    """Outcome of the convergence check for one subject."""

    subject_id: str
    pending_tasks: int
    converged: bool
    status_changed: bool


@dataclass(frozen=True)
class RegistrationRunResult:
    """Structured summary returned by the trigger surface.

    status is 'processed', 'no_pending_tasks', or 'locked' (another runner
    holds the subject's lease; nothing was attempted).
    """

    subject_id: str
    status: str
    processed_tasks: int
    successful_tasks: int
    failed_tasks: int
    skipped_tasks: int
    registration_completed: bool
    task_results: tuple[TaskOutcome, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EnqueueResult:
    """Result of enqueueing the default task set for a subject."""

    subject_id: str
    created_task_types: tuple[str, ...]
    existing_task_types: tuple[str, ...]


@dataclass(frozen=True)
class ResetResult:
    """Result of the operator reset of stuck and/or failed tasks."""

    subject_id: str
    stuck_tasks_reset: int
    failed_tasks_reset: int
    run: RegistrationRunResult | None


@dataclass(frozen=True)
class RegistrationProgress:
    """Admin diagnostic view of a subject's onboarding."""

    subject_id: str
    registration_status: RegistrationStatus | None
    registration_completed_at: datetime | None
    counts_by_status: dict[str, int]
    tasks: tuple[RegistrationTaskResult, ...]
