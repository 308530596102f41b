"""Retry policy for registration tasks (threshold and backoff)."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.domain.enums import TaskStatus

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_UNIT = timedelta(seconds=60)


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts a task gets and how long to wait between them.

    A failure with ``current_retry_count`` already recorded moves the task to
    ``retry_count = current_retry_count + 1``. The task becomes terminally
    FAILED once that new count reaches ``max_retries``; otherwise it goes
    back to PENDING and is eligible again at
    ``now + (current_retry_count + 1) * backoff_unit``.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_unit: timedelta = DEFAULT_BACKOFF_UNIT

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.backoff_unit <= timedelta(0):
            raise ValueError("backoff_unit must be positive")

    @classmethod
    def from_seconds(cls, max_retries: int, backoff_unit_seconds: float) -> "RetryPolicy":
        """Build a policy from plain settings values."""
        return cls(
            max_retries=max_retries,
            backoff_unit=timedelta(seconds=backoff_unit_seconds),
        )

    def is_exhausted(self, current_retry_count: int) -> bool:
        """Return True if one more failure makes the task terminal."""
        return current_retry_count + 1 >= self.max_retries

    def status_after_failure(self, current_retry_count: int) -> TaskStatus:
        """Status a task takes after failing with the given pre-increment count."""
        if self.is_exhausted(current_retry_count):
            return TaskStatus.FAILED
        return TaskStatus.PENDING

    def next_retry_at(self, now: datetime, current_retry_count: int) -> datetime:
        """Earliest time the task may be attempted again (linear in retry count)."""
        return now + self.backoff_unit * (current_retry_count + 1)
