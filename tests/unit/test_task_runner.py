"""Unit tests for RegistrationTaskRunner (claiming, settle-all join, timeouts, failure recording)."""

import asyncio
from datetime import timedelta

from app.application.use_cases.registration.task_runner import RegistrationTaskRunner
from app.domain.enums import TaskStatus
from app.domain.exceptions import PrerequisiteNotMetException
from app.domain.value_objects.task_payloads import ChatRoomResult, SkippedResult
from tests.fakes import InMemoryRegistrationTaskStore

SUBJECT = "subject-1"


class StubHandler:
    """Handler returning a fixed payload, raising, or sleeping first."""

    def __init__(self, task_type, result=None, error=None, delay=0.0):
        self.task_type = task_type
        self._result = result or ChatRoomResult(room_id=f"room-{task_type}")
        self._error = error
        self._delay = delay
        self.calls = 0

    async def handle(self, subject_id, task):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result


def _runner(task_store, clock, *handlers, timeout_seconds=1.0):
    return RegistrationTaskRunner(
        task_store,
        {h.task_type: h for h in handlers},
        timeout_seconds=timeout_seconds,
        clock=clock,
    )


async def test_empty_subject_returns_empty_summary(task_store, clock) -> None:
    summary = await _runner(task_store, clock).run(SUBJECT)
    assert summary.processed == 0
    assert summary.skipped_task_ids == ()


async def test_one_failure_does_not_affect_siblings(task_store, clock) -> None:
    """Two succeed and one fails; each outcome is recorded on its own task."""
    a = task_store.add(SUBJECT, "a", priority=30)
    b = task_store.add(SUBJECT, "b", priority=20)
    c = task_store.add(SUBJECT, "c", priority=10)
    runner = _runner(
        task_store,
        clock,
        StubHandler("a"),
        StubHandler("b", error=PrerequisiteNotMetException("b", SUBJECT, "missing")),
        StubHandler("c"),
    )

    summary = await runner.run(SUBJECT)

    assert (summary.processed, summary.succeeded, summary.failed) == (3, 2, 1)
    assert task_store.get(a.id).status is TaskStatus.COMPLETED
    assert task_store.get(c.id).status is TaskStatus.COMPLETED
    failed = task_store.get(b.id)
    assert failed.status is TaskStatus.PENDING
    assert failed.retry_count == 1
    assert failed.error_details["error_code"] == "PREREQUISITE_NOT_MET"
    assert [o.task_type for o in summary.outcomes] == ["a", "b", "c"]


async def test_completion_stores_result_payload(task_store, clock) -> None:
    task = task_store.add(SUBJECT, "a")
    await _runner(task_store, clock, StubHandler("a", result=SkippedResult("n/a"))).run(SUBJECT)

    stored = task_store.get(task.id)
    assert stored.result_payload == {"kind": "skipped", "skipped": True, "reason": "n/a"}
    assert stored.error_details is None


async def test_hung_handler_times_out_without_blocking_siblings(task_store, clock) -> None:
    slow = task_store.add(SUBJECT, "slow", priority=10)
    fast = task_store.add(SUBJECT, "fast", priority=5)
    runner = _runner(
        task_store,
        clock,
        StubHandler("slow", delay=5.0),
        StubHandler("fast"),
        timeout_seconds=0.05,
    )

    summary = await runner.run(SUBJECT)

    assert summary.succeeded == 1
    assert task_store.get(fast.id).status is TaskStatus.COMPLETED
    timed_out = task_store.get(slow.id)
    assert timed_out.retry_count == 1
    assert timed_out.error_details["error_code"] == "HANDLER_TIMEOUT"


async def test_unknown_task_type_is_recorded_as_failure(task_store, clock) -> None:
    task = task_store.add(SUBJECT, "send_fax")

    summary = await _runner(task_store, clock).run(SUBJECT)

    assert summary.failed == 1
    stored = task_store.get(task.id)
    assert stored.retry_count == 1
    assert stored.error_details["message"] == "No processor found for task type: send_fax"


async def test_failure_schedules_retry_with_backoff(task_store, clock) -> None:
    task = task_store.add(SUBJECT, "a")
    await _runner(task_store, clock, StubHandler("a", error=RuntimeError("boom"))).run(SUBJECT)

    stored = task_store.get(task.id)
    assert stored.next_retry_at == clock.now + timedelta(seconds=60)
    assert stored.error_details["message"] == "boom"
    assert stored.error_details["error_code"] == "RuntimeError"


async def test_task_claimed_elsewhere_is_skipped(clock) -> None:
    """Lost claim: the handler is not called and the task counts as skipped, not failed."""

    class ContendedStore(InMemoryRegistrationTaskStore):
        lost: set[str] = set()

        async def claim_task(self, task_id, expected_retry_count):
            if task_id in self.lost:
                return False
            return await super().claim_task(task_id, expected_retry_count)

    task_store = ContendedStore(clock)
    won = task_store.add(SUBJECT, "a", priority=10)
    lost = task_store.add(SUBJECT, "b", priority=5)
    task_store.lost = {lost.id}
    handler_b = StubHandler("b")

    summary = await _runner(task_store, clock, StubHandler("a"), handler_b).run(SUBJECT)

    assert summary.processed == 1
    assert summary.skipped_task_ids == (lost.id,)
    assert handler_b.calls == 0
    assert task_store.get(won.id).status is TaskStatus.COMPLETED
    assert task_store.get(lost.id).retry_count == 0


async def test_store_error_is_isolated_to_its_task(clock) -> None:
    """A store write failing for one task still yields outcomes for the others."""

    class FlakyStore(InMemoryRegistrationTaskStore):
        broken: str = ""

        async def mark_completed(self, task_id, result_payload):
            if task_id == self.broken:
                raise ConnectionError("connection reset")
            return await super().mark_completed(task_id, result_payload)

    task_store = FlakyStore(clock)
    broken = task_store.add(SUBJECT, "a", priority=10)
    ok = task_store.add(SUBJECT, "b", priority=5)
    task_store.broken = broken.id

    summary = await _runner(task_store, clock, StubHandler("a"), StubHandler("b")).run(SUBJECT)

    assert summary.processed == 2
    assert summary.failed == 1
    failed = next(o for o in summary.outcomes if o.task_id == broken.id)
    assert failed.error["error_code"] == "ConnectionError"
    assert task_store.get(ok.id).status is TaskStatus.COMPLETED
    assert task_store.get(broken.id).status is TaskStatus.IN_PROGRESS


async def test_due_before_filters_tasks_in_backoff(task_store, clock) -> None:
    task_store.add(SUBJECT, "a", next_retry_at=clock.now + timedelta(minutes=5))
    handler = StubHandler("a")

    summary = await _runner(task_store, clock, handler).run(SUBJECT, due_before=clock.now)

    assert summary.processed == 0
    assert handler.calls == 0
