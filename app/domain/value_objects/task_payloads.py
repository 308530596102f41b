"""Typed result and error payloads for registration tasks.

A task's ``result_payload`` is persisted as JSON but modelled here as a tagged
union keyed by task type: every payload serializes with a ``kind`` tag and
``parse_result_payload`` maps it back to the right class. SkippedResult is
valid for any task type (applicability gating).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from app.domain.enums import TaskType
from app.domain.exceptions import OnboardingException


@dataclass(frozen=True)
class SkippedResult:
    """Task did not apply to this subject (e.g. care team for a doctor)."""

    reason: str

    kind: ClassVar[str] = "skipped"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "skipped": True, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkippedResult:
        return cls(reason=str(data.get("reason", "")))


@dataclass(frozen=True)
class CareTeamAssignedResult:
    """assign_care_team outcome. already_assigned marks an idempotent short-circuit."""

    assignment_id: str
    doctor_id: str
    nutritionist_id: str | None = None
    already_assigned: bool = False

    kind: ClassVar[str] = "care_team_assigned"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "care_team_assigned": True,
            "assignment_id": self.assignment_id,
            "doctor_id": self.doctor_id,
            "nutritionist_id": self.nutritionist_id,
            "already_assigned": self.already_assigned,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CareTeamAssignedResult:
        return cls(
            assignment_id=str(data["assignment_id"]),
            doctor_id=str(data["doctor_id"]),
            nutritionist_id=data.get("nutritionist_id"),
            already_assigned=bool(data.get("already_assigned", False)),
        )


@dataclass(frozen=True)
class ChatRoomResult:
    """create_chat_room outcome."""

    room_id: str
    created: bool = True

    kind: ClassVar[str] = "chat_room"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "room_id": self.room_id, "created": self.created}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatRoomResult:
        return cls(room_id=str(data["room_id"]), created=bool(data.get("created", True)))


@dataclass(frozen=True)
class WelcomeNotificationResult:
    """send_welcome_notification outcome."""

    template: str
    recipient: str

    kind: ClassVar[str] = "welcome_notification"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "notification_sent": True,
            "template": self.template,
            "recipient": self.recipient,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WelcomeNotificationResult:
        return cls(template=str(data["template"]), recipient=str(data["recipient"]))


@dataclass(frozen=True)
class ProfessionalProfileResult:
    """setup_professional_profile outcome. created is False when the row already existed."""

    role: str
    created: bool

    kind: ClassVar[str] = "professional_profile"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "profile_setup": True,
            "role": self.role,
            "created": self.created,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProfessionalProfileResult:
        return cls(role=str(data["role"]), created=bool(data.get("created", False)))


TaskResultPayload = (
    SkippedResult
    | CareTeamAssignedResult
    | ChatRoomResult
    | WelcomeNotificationResult
    | ProfessionalProfileResult
)

_RESULT_TYPES: dict[str, type] = {
    TaskType.ASSIGN_CARE_TEAM.value: CareTeamAssignedResult,
    TaskType.CREATE_CHAT_ROOM.value: ChatRoomResult,
    TaskType.SEND_WELCOME_NOTIFICATION.value: WelcomeNotificationResult,
    TaskType.SETUP_PROFESSIONAL_PROFILE.value: ProfessionalProfileResult,
}


def parse_result_payload(task_type: str, data: dict[str, Any]) -> TaskResultPayload:
    """Map a stored result payload back to its typed form.

    Raises:
        ValueError: If the kind tag does not belong to the task type.
    """
    kind = data.get("kind")
    if kind == SkippedResult.kind:
        return SkippedResult.from_dict(data)
    result_type = _RESULT_TYPES.get(task_type)
    if result_type is None:
        raise ValueError(f"Unknown task type: {task_type!r}")
    if kind != result_type.kind:
        raise ValueError(
            f"Payload kind {kind!r} does not match task type {task_type!r}"
        )
    return result_type.from_dict(data)


@dataclass(frozen=True)
class TaskErrorDetails:
    """Last error recorded on a task (message + timestamp)."""

    message: str
    error_code: str
    occurred_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "error_code": self.error_code,
            "timestamp": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskErrorDetails:
        return cls(
            message=str(data.get("message", "")),
            error_code=str(data.get("error_code", "")),
            occurred_at=datetime.fromisoformat(data["timestamp"]),
        )

    @classmethod
    def from_exception(cls, exc: BaseException, occurred_at: datetime) -> TaskErrorDetails:
        """Build error details from any exception raised while running a task."""
        if isinstance(exc, OnboardingException):
            return cls(message=exc.message, error_code=exc.error_code, occurred_at=occurred_at)
        return cls(
            message=str(exc) or exc.__class__.__name__,
            error_code=exc.__class__.__name__,
            occurred_at=occurred_at,
        )
