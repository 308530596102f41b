"""Service interfaces (ports) for the application layer.

Protocols define contracts for downstream services and task handlers (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.care_team import (
        CareTeamRoom,
        NotificationDispatchResult,
        WelcomeNotification,
    )
    from app.application.dtos.registration import RegistrationTaskResult
    from app.domain.value_objects.task_payloads import TaskResultPayload


# Room provisioning interface
class IRoomProvisioningService(Protocol):
    """Protocol for care team chat room provisioning."""

    async def get_or_create_care_team_room(self, patient_id: str) -> CareTeamRoom:
        """Return the patient's care team room, creating it (and its members) if missing."""


# Notification dispatch interface
class INotificationDispatchService(Protocol):
    """Protocol for sending the welcome notification (email/SMS channel abstracted)."""

    async def send_welcome_notification(
        self, notification: WelcomeNotification
    ) -> NotificationDispatchResult:
        """Dispatch the notification; delivered=False means the channel refused it."""


# Task handler interface
class ITaskHandler(Protocol):
    """Protocol for one registration task type.

    Handlers are idempotent, return SkippedResult when the task does not
    apply, and raise on any failure.
    """

    task_type: str

    async def handle(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        """Run the task for subject and return its typed result."""
