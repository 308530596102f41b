"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Every mutating method is a single atomic statement in the SQL implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.care_team import (
        CareTeamAssignment,
        DefaultCareTeamConfig,
        SubjectProfile,
    )
    from app.application.dtos.registration import RegistrationTaskResult, TaskSpec
    from app.domain.enums import RegistrationStatus, UserRole


# Registration task store interface
class IRegistrationTaskStore(Protocol):
    """Protocol for the durable registration task queue (DIP)."""

    async def list_pending_tasks(
        self, subject_id: str, due_before: datetime | None = None
    ) -> list[RegistrationTaskResult]:
        """Return pending tasks for subject, priority desc then created_at asc.

        When due_before is set, only tasks with next_retry_at <= due_before.
        """

    async def claim_task(self, task_id: str, expected_retry_count: int) -> bool:
        """Move task pending -> in_progress if retry_count still matches. True if claimed."""

    async def mark_completed(self, task_id: str, result_payload: dict[str, Any]) -> bool:
        """Set completed, store payload, clear error. False if task was already resolved."""

    async def mark_failed(
        self, task_id: str, error: dict[str, Any], current_retry_count: int
    ) -> bool:
        """Record a failed attempt (CAS on current_retry_count). False if the CAS lost."""

    async def count_pending(self, subject_id: str) -> int:
        """Return number of unresolved (pending or in_progress) tasks for subject."""

    async def count_failed(self, subject_id: str) -> int:
        """Return number of terminally failed tasks for subject."""

    async def count_tasks(self, subject_id: str) -> int:
        """Return number of task rows for subject, in any status."""

    async def create_tasks(
        self, subject_id: str, specs: Sequence[TaskSpec]
    ) -> list[str]:
        """Insert tasks, skipping task types the subject already has. Return created task types."""

    async def list_tasks(self, subject_id: str) -> list[RegistrationTaskResult]:
        """Return every task for subject (all statuses), priority desc then created_at asc."""

    async def reset_stuck_tasks(self, subject_id: str, stale_before: datetime) -> int:
        """Move in_progress tasks last updated before stale_before back to pending. Return count."""

    async def reset_failed_tasks(self, subject_id: str) -> int:
        """Move failed tasks back to pending with retry_count=0 and error cleared. Return count."""

    async def list_subjects_with_due_tasks(
        self, now: datetime, limit: int = 100, *, stuck_before: datetime | None = None
    ) -> list[str]:
        """Return distinct subject ids that have pending tasks with next_retry_at <= now.

        With stuck_before, subjects holding in_progress tasks last updated before
        it are included too.
        """


# Profile store interface
class IProfileStore(Protocol):
    """Protocol for the profile/role store (DIP)."""

    async def get_role(self, subject_id: str) -> UserRole | None:
        """Return the user's role, or None if the user has no role."""

    async def get_profile(self, subject_id: str) -> SubjectProfile | None:
        """Return the profile, or None if not found."""

    async def mark_fully_registered(self, subject_id: str, completed_at: datetime) -> bool:
        """Set fully_registered and stamp completed_at unless already fully registered.

        Returns True if the row changed.
        """

    async def set_registration_status(
        self, subject_id: str, status: RegistrationStatus
    ) -> bool:
        """Set registration status (operator reset). Returns True if the row exists."""

    async def ensure_professional_details(self, subject_id: str, role: UserRole) -> bool:
        """Create the professional details row if missing. Returns True if created."""


# Care team store interface
class ICareTeamStore(Protocol):
    """Protocol for care team assignments and the default care team (DIP)."""

    async def get_assignment(self, patient_id: str) -> CareTeamAssignment | None:
        """Return the patient's care team assignment, or None."""

    async def create_assignment(
        self, patient_id: str, doctor_id: str, nutritionist_id: str | None = None
    ) -> CareTeamAssignment:
        """Create the assignment (returns the existing one if already assigned)."""

    async def get_default_care_team_config(self) -> DefaultCareTeamConfig | None:
        """Return the active default care team, or None if none is configured."""


# Subject lease interface
class ISubjectLeaseStore(Protocol):
    """Protocol for per-subject processing leases (advisory lock with TTL)."""

    async def acquire(self, subject_id: str, owner: str, ttl_seconds: int) -> bool:
        """Take the lease if free or expired. True if owner now holds it."""

    async def release(self, subject_id: str, owner: str) -> None:
        """Release the lease if owner still holds it."""
