"""Application DTOs (no ORM dependency)."""

from app.application.dtos.care_team import (
    CareTeamAssignment,
    CareTeamRoom,
    DefaultCareTeamConfig,
    NotificationDispatchResult,
    SubjectProfile,
    WelcomeNotification,
)
from app.application.dtos.registration import (
    ConvergenceResult,
    EnqueueResult,
    RegistrationProgress,
    RegistrationRunResult,
    RegistrationTaskResult,
    ResetResult,
    TaskOutcome,
    TaskRunSummary,
    TaskSpec,
)

__all__ = [
    "CareTeamAssignment",
    "CareTeamRoom",
    "ConvergenceResult",
    "DefaultCareTeamConfig",
    "EnqueueResult",
    "NotificationDispatchResult",
    "RegistrationProgress",
    "RegistrationRunResult",
    "RegistrationTaskResult",
    "ResetResult",
    "SubjectProfile",
    "TaskOutcome",
    "TaskRunSummary",
    "TaskSpec",
    "WelcomeNotification",
]
