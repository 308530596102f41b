"""Registration task API schemas. JSON uses camelCase (subjectId, processedTasks, ...)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.enums import RegistrationStatus, TaskStatus


class _CamelModel(BaseModel):
    """Base for camelCase JSON; Python code uses snake_case field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ProcessRegistrationTasksRequest(_CamelModel):
    """Request body for POST /registration-tasks/process."""

    subject_id: str = Field(..., max_length=255, description="User whose tasks to process")


class EnqueueRegistrationTasksRequest(_CamelModel):
    """Request body for POST /registration-tasks/enqueue."""

    subject_id: str = Field(..., max_length=255, description="User to enqueue tasks for")


class ResetRegistrationTasksRequest(_CamelModel):
    """Request body for POST /registration-tasks/reset."""

    subject_id: str = Field(..., max_length=255)
    reset_stuck: bool = Field(
        default=True, description="Return stale in_progress tasks to pending"
    )
    reset_failed: bool = Field(
        default=False,
        description="Return failed tasks to pending with retry count 0",
    )
    trigger: bool = Field(default=True, description="Process tasks after the reset")


class TaskResultResponse(_CamelModel):
    """Outcome of one task in a run."""

    task_id: str
    task_type: str
    success: bool
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None


class RegistrationRunResponse(_CamelModel):
    """Summary of one trigger run."""

    subject_id: str
    status: str = Field(..., description="processed, no_pending_tasks, or locked")
    processed_tasks: int
    successful_tasks: int
    failed_tasks: int
    skipped_tasks: int = Field(
        ..., description="Tasks another runner claimed first (not attempted)"
    )
    registration_completed: bool
    task_results: list[TaskResultResponse] = Field(default_factory=list)


class EnqueueRegistrationTasksResponse(_CamelModel):
    """Task types created by an enqueue call vs. already present."""

    subject_id: str
    created_task_types: list[str]
    existing_task_types: list[str]


class ResetRegistrationTasksResponse(_CamelModel):
    """Counts of reset tasks plus the run summary when trigger was set."""

    subject_id: str
    stuck_tasks_reset: int
    failed_tasks_reset: int
    run: RegistrationRunResponse | None = None


class RegistrationTaskResponse(_CamelModel):
    """One registration task row (admin diagnostic)."""

    id: str
    task_type: str
    status: TaskStatus
    priority: int
    retry_count: int
    next_retry_at: datetime
    error_details: dict[str, Any] | None
    result_payload: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


class RegistrationProgressResponse(_CamelModel):
    """Registration status and every task of a subject."""

    subject_id: str
    registration_status: RegistrationStatus | None
    registration_completed_at: datetime | None
    counts_by_status: dict[str, int]
    tasks: list[RegistrationTaskResponse]
