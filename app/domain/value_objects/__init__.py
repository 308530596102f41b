"""Domain value objects: retry policy and typed task payloads."""

from app.domain.value_objects.retry_policy import RetryPolicy
from app.domain.value_objects.task_payloads import (
    CareTeamAssignedResult,
    ChatRoomResult,
    ProfessionalProfileResult,
    SkippedResult,
    TaskErrorDetails,
    TaskResultPayload,
    WelcomeNotificationResult,
    parse_result_payload,
)

__all__ = [
    "RetryPolicy",
    "CareTeamAssignedResult",
    "ChatRoomResult",
    "ProfessionalProfileResult",
    "SkippedResult",
    "TaskErrorDetails",
    "TaskResultPayload",
    "WelcomeNotificationResult",
    "parse_result_payload",
]
