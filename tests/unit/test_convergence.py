"""Unit tests for ConvergenceChecker (pending gate, failed-task policy, stamp once)."""

from app.application.use_cases.registration.convergence import ConvergenceChecker
from app.domain.enums import RegistrationStatus, TaskStatus, UserRole

SUBJECT = "patient-1"


async def test_pending_task_blocks_convergence(task_store, profile_store, clock) -> None:
    profile_store.add(SUBJECT, UserRole.PATIENT)
    task_store.add(SUBJECT, "assign_care_team", status=TaskStatus.COMPLETED)
    task_store.add(SUBJECT, "create_chat_room")

    result = await ConvergenceChecker(task_store, profile_store, clock=clock).check(SUBJECT)

    assert result.converged is False
    assert result.pending_tasks == 1
    assert profile_store.mark_fully_registered_calls == 0


async def test_in_progress_task_blocks_convergence(task_store, profile_store, clock) -> None:
    profile_store.add(SUBJECT, UserRole.PATIENT)
    task_store.add(SUBJECT, "assign_care_team", status=TaskStatus.IN_PROGRESS)

    result = await ConvergenceChecker(task_store, profile_store, clock=clock).check(SUBJECT)

    assert result.converged is False


async def test_marks_fully_registered_once(task_store, profile_store, clock) -> None:
    """A second check is a no-op and keeps the first completion timestamp."""
    profile_store.add(SUBJECT, UserRole.PATIENT)
    task_store.add(SUBJECT, "assign_care_team", status=TaskStatus.COMPLETED)
    checker = ConvergenceChecker(task_store, profile_store, clock=clock)

    first = await checker.check(SUBJECT)
    stamped_at = clock.now
    clock.advance(3600)
    second = await checker.check(SUBJECT)

    assert first.converged is True and first.status_changed is True
    assert second.converged is True and second.status_changed is False
    profile = profile_store.profiles[SUBJECT]
    assert profile.registration_status is RegistrationStatus.FULLY_REGISTERED
    assert profile.registration_completed_at == stamped_at


async def test_failed_task_does_not_block_by_default(task_store, profile_store, clock) -> None:
    profile_store.add(SUBJECT, UserRole.PATIENT)
    task_store.add(SUBJECT, "assign_care_team", status=TaskStatus.COMPLETED)
    task_store.add(SUBJECT, "send_welcome_notification", status=TaskStatus.FAILED, retry_count=3)

    result = await ConvergenceChecker(task_store, profile_store, clock=clock).check(SUBJECT)

    assert result.converged is True


async def test_failed_task_blocks_when_all_completed_required(
    task_store, profile_store, clock
) -> None:
    profile_store.add(SUBJECT, UserRole.PATIENT)
    task_store.add(SUBJECT, "send_welcome_notification", status=TaskStatus.FAILED, retry_count=3)
    checker = ConvergenceChecker(
        task_store, profile_store, requires_all_completed=True, clock=clock
    )

    result = await checker.check(SUBJECT)

    assert result.converged is False
    assert profile_store.profiles[SUBJECT].registration_status is RegistrationStatus.PAYMENT_COMPLETE


async def test_subject_without_tasks_does_not_converge(task_store, profile_store, clock) -> None:
    """Processing that runs before enqueue must not mark the subject registered."""
    profile_store.add(SUBJECT, UserRole.PATIENT)

    result = await ConvergenceChecker(task_store, profile_store, clock=clock).check(SUBJECT)

    assert result.converged is False
    assert result.status_changed is False
    assert profile_store.mark_fully_registered_calls == 0
    assert profile_store.profiles[SUBJECT].registration_status is RegistrationStatus.PAYMENT_COMPLETE
