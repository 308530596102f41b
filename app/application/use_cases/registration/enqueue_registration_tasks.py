"""Enqueue the default registration task set for a subject."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.application.dtos.registration import EnqueueResult, TaskSpec
from app.application.use_cases.registration.process_registration_tasks import (
    validate_subject_id,
)
from app.domain.enums import TaskType, UserRole
from app.domain.exceptions import ResourceNotFoundException

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IProfileStore,
        IRegistrationTaskStore,
    )

logger = logging.getLogger(__name__)

# Higher priority is listed first; execution within a run is concurrent.
PATIENT_TASKS: tuple[TaskSpec, ...] = (
    TaskSpec(TaskType.ASSIGN_CARE_TEAM.value, priority=30),
    TaskSpec(TaskType.CREATE_CHAT_ROOM.value, priority=20),
    TaskSpec(TaskType.SEND_WELCOME_NOTIFICATION.value, priority=10),
)
PROFESSIONAL_TASKS: tuple[TaskSpec, ...] = (
    TaskSpec(TaskType.SETUP_PROFESSIONAL_PROFILE.value, priority=20),
    TaskSpec(TaskType.SEND_WELCOME_NOTIFICATION.value, priority=10),
)
STAFF_TASKS: tuple[TaskSpec, ...] = (
    TaskSpec(TaskType.SEND_WELCOME_NOTIFICATION.value, priority=10),
)


def default_tasks_for_role(role: UserRole) -> tuple[TaskSpec, ...]:
    """Return the task set a newly registered user of this role needs."""
    if role is UserRole.PATIENT:
        return PATIENT_TASKS
    if role.is_professional:
        return PROFESSIONAL_TASKS
    return STAFF_TASKS


class EnqueueRegistrationTasksUseCase:
    """Creates the role-appropriate tasks after signup/payment.

    Safe to call repeatedly: task types the subject already has (in any
    status) are left untouched, so re-enqueueing never duplicates work.
    """

    def __init__(
        self, task_store: IRegistrationTaskStore, profile_store: IProfileStore
    ) -> None:
        self._task_store = task_store
        self._profile_store = profile_store

    async def execute(self, subject_id: str | None) -> EnqueueResult:
        subject_id = validate_subject_id(subject_id)
        role = await self._profile_store.get_role(subject_id)
        if role is None:
            raise ResourceNotFoundException("user_role", subject_id)

        specs = default_tasks_for_role(role)
        created = await self._task_store.create_tasks(subject_id, specs)
        existing = [s.task_type for s in specs if s.task_type not in created]
        logger.info(
            "Enqueued registration tasks for %s (%s): created=%s existing=%s",
            subject_id,
            role.value,
            created,
            existing,
        )
        return EnqueueResult(
            subject_id=subject_id,
            created_task_types=tuple(created),
            existing_task_types=tuple(existing),
        )
