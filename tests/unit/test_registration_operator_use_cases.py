"""Tests for enqueue, operator reset, and progress use cases."""

from datetime import timedelta

import pytest

from app.application.use_cases.registration import (
    EnqueueRegistrationTasksUseCase,
    GetRegistrationProgressUseCase,
    ResetRegistrationTasksUseCase,
    default_tasks_for_role,
)
from app.domain.enums import RegistrationStatus, TaskStatus, TaskType, UserRole
from app.domain.exceptions import ResourceNotFoundException, ValidationException

PATIENT_ID = "patient-1"


def test_default_tasks_per_role() -> None:
    assert [s.task_type for s in default_tasks_for_role(UserRole.PATIENT)] == [
        "assign_care_team",
        "create_chat_room",
        "send_welcome_notification",
    ]
    assert [s.task_type for s in default_tasks_for_role(UserRole.NUTRITIONIST)] == [
        "setup_professional_profile",
        "send_welcome_notification",
    ]
    assert [s.task_type for s in default_tasks_for_role(UserRole.RECEPTION)] == [
        "send_welcome_notification",
    ]


async def test_enqueue_creates_role_task_set(task_store, profile_store) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)

    result = await EnqueueRegistrationTasksUseCase(task_store, profile_store).execute(PATIENT_ID)

    assert result.created_task_types == (
        "assign_care_team",
        "create_chat_room",
        "send_welcome_notification",
    )
    assert result.existing_task_types == ()
    pending = await task_store.list_pending_tasks(PATIENT_ID)
    assert [t.priority for t in pending] == [30, 20, 10]


async def test_enqueue_twice_does_not_duplicate(task_store, profile_store) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    use_case = EnqueueRegistrationTasksUseCase(task_store, profile_store)
    await use_case.execute(PATIENT_ID)
    room = task_store.by_type(PATIENT_ID, TaskType.CREATE_CHAT_ROOM.value)
    await task_store.mark_failed(room.id, {"message": "x"}, 0)

    result = await use_case.execute(PATIENT_ID)

    assert result.created_task_types == ()
    assert len(result.existing_task_types) == 3
    assert len(task_store.tasks) == 3
    assert task_store.get(room.id).retry_count == 1


async def test_enqueue_unknown_subject_raises(task_store, profile_store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await EnqueueRegistrationTasksUseCase(task_store, profile_store).execute("ghost")


async def test_enqueue_requires_subject_id(task_store, profile_store) -> None:
    with pytest.raises(ValidationException):
        await EnqueueRegistrationTasksUseCase(task_store, profile_store).execute("")


def _reset_use_case(task_store, profile_store, process_use_case, clock):
    return ResetRegistrationTasksUseCase(
        task_store, profile_store, process_use_case, stuck_after_seconds=900, clock=clock
    )


async def test_reset_stuck_requeues_stale_claims_only(
    task_store, profile_store, process_use_case, clock
) -> None:
    profile_store.add("doc-2", UserRole.DOCTOR)
    stale = task_store.add(
        "doc-2",
        TaskType.SETUP_PROFESSIONAL_PROFILE.value,
        status=TaskStatus.IN_PROGRESS,
        retry_count=1,
        updated_at=clock.now - timedelta(hours=1),
    )
    fresh = task_store.add(
        "doc-2",
        TaskType.SEND_WELCOME_NOTIFICATION.value,
        status=TaskStatus.IN_PROGRESS,
        updated_at=clock.now - timedelta(seconds=30),
    )

    result = await _reset_use_case(task_store, profile_store, process_use_case, clock).execute(
        "doc-2", trigger=False
    )

    assert result.stuck_tasks_reset == 1
    assert result.failed_tasks_reset == 0
    assert result.run is None
    assert task_store.get(stale.id).status is TaskStatus.PENDING
    assert task_store.get(stale.id).retry_count == 1
    assert task_store.get(fresh.id).status is TaskStatus.IN_PROGRESS


async def test_reset_failed_restarts_retries_and_reprocesses(
    task_store, profile_store, process_use_case, dispatcher, clock
) -> None:
    profile_store.add(
        "doc-2", UserRole.DOCTOR, registration_status=RegistrationStatus.FULLY_REGISTERED
    )
    failed = task_store.add(
        "doc-2",
        TaskType.SEND_WELCOME_NOTIFICATION.value,
        status=TaskStatus.FAILED,
        retry_count=3,
        error_details={"message": "HTTP 400"},
    )

    result = await _reset_use_case(task_store, profile_store, process_use_case, clock).execute(
        "doc-2", reset_stuck=False, reset_failed=True
    )

    assert result.failed_tasks_reset == 1
    assert result.run is not None
    assert result.run.successful_tasks == 1
    assert result.run.registration_completed is True
    task = task_store.get(failed.id)
    assert task.status is TaskStatus.COMPLETED
    assert task.retry_count == 0
    assert len(dispatcher.sent) == 1
    profile = profile_store.profiles["doc-2"]
    assert profile.registration_status is RegistrationStatus.FULLY_REGISTERED
    assert profile.registration_completed_at == clock.now


async def test_reset_failed_reopens_registration_status(
    task_store, profile_store, process_use_case, clock
) -> None:
    profile_store.add(
        "doc-2", UserRole.DOCTOR, registration_status=RegistrationStatus.FULLY_REGISTERED
    )
    task_store.add(
        "doc-2", TaskType.SEND_WELCOME_NOTIFICATION.value, status=TaskStatus.FAILED, retry_count=3
    )

    await _reset_use_case(task_store, profile_store, process_use_case, clock).execute(
        "doc-2", reset_failed=True, trigger=False
    )

    profile = profile_store.profiles["doc-2"]
    assert profile.registration_status is RegistrationStatus.PAYMENT_COMPLETE
    assert profile.registration_completed_at is None


async def test_reset_failed_keeps_intermediate_status(
    task_store, profile_store, process_use_case, clock
) -> None:
    """Only a converged subject is reopened; signup-flow statuses are left alone."""
    profile_store.add(
        PATIENT_ID, UserRole.PATIENT, registration_status=RegistrationStatus.CARE_TEAM_ASSIGNED
    )
    task_store.add(
        PATIENT_ID,
        TaskType.SEND_WELCOME_NOTIFICATION.value,
        status=TaskStatus.FAILED,
        retry_count=3,
    )

    result = await _reset_use_case(task_store, profile_store, process_use_case, clock).execute(
        PATIENT_ID, reset_failed=True, trigger=False
    )

    assert result.failed_tasks_reset == 1
    assert (
        profile_store.profiles[PATIENT_ID].registration_status
        is RegistrationStatus.CARE_TEAM_ASSIGNED
    )


async def test_reset_without_failed_tasks_keeps_status(
    task_store, profile_store, process_use_case, clock
) -> None:
    profile_store.add(
        "doc-2", UserRole.DOCTOR, registration_status=RegistrationStatus.FULLY_REGISTERED
    )

    result = await _reset_use_case(task_store, profile_store, process_use_case, clock).execute(
        "doc-2", reset_failed=True, trigger=False
    )

    assert result.failed_tasks_reset == 0
    assert (
        profile_store.profiles["doc-2"].registration_status
        is RegistrationStatus.FULLY_REGISTERED
    )


async def test_progress_counts_every_status(task_store, profile_store) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    task_store.add(PATIENT_ID, "assign_care_team", status=TaskStatus.COMPLETED)
    task_store.add(
        PATIENT_ID,
        "create_chat_room",
        retry_count=1,
        error_details={"message": "no care team assignment found"},
    )

    progress = await GetRegistrationProgressUseCase(task_store, profile_store).execute(PATIENT_ID)

    assert progress.registration_status is RegistrationStatus.PAYMENT_COMPLETE
    assert progress.counts_by_status == {
        "pending": 1,
        "in_progress": 0,
        "completed": 1,
        "failed": 0,
    }
    assert [t.task_type for t in progress.tasks] == ["assign_care_team", "create_chat_room"]
    assert progress.tasks[1].error_details["message"] == "no care team assignment found"


async def test_progress_without_profile_or_tasks_raises(task_store, profile_store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await GetRegistrationProgressUseCase(task_store, profile_store).execute("ghost")


async def test_progress_with_tasks_but_no_profile(task_store, profile_store) -> None:
    task_store.add("orphan", "send_welcome_notification")

    progress = await GetRegistrationProgressUseCase(task_store, profile_store).execute("orphan")

    assert progress.registration_status is None
    assert progress.counts_by_status["pending"] == 1
