"""Domain enumerations for the onboarding service.

Enums represent fixed sets of domain values (task types, task status,
user roles, registration status).
"""

from enum import Enum


class TaskType(str, Enum):
    """Kind of deferred onboarding work. One handler is registered per type."""

    ASSIGN_CARE_TEAM = "assign_care_team"
    CREATE_CHAT_ROOM = "create_chat_room"
    SEND_WELCOME_NOTIFICATION = "send_welcome_notification"
    SETUP_PROFESSIONAL_PROFILE = "setup_professional_profile"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid task type values as strings."""
        return [t.value for t in cls]


class TaskStatus(str, Enum):
    """Registration task lifecycle status.

    IN_PROGRESS is the claim a runner holds while executing the task; a row
    left in that state after a crash is picked up by the operator reset.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def unresolved(cls) -> tuple["TaskStatus", ...]:
        """Statuses that still count as pending for convergence."""
        return (cls.PENDING, cls.IN_PROGRESS)

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [s.value for s in cls]


class UserRole(str, Enum):
    """Role of a registered user."""

    PATIENT = "patient"
    DOCTOR = "doctor"
    NUTRITIONIST = "nutritionist"
    ADMINISTRATOR = "administrator"
    RECEPTION = "reception"

    @property
    def is_professional(self) -> bool:
        """Doctors and nutritionists are care professionals."""
        return self in (UserRole.DOCTOR, UserRole.NUTRITIONIST)


class RegistrationStatus(str, Enum):
    """Aggregate registration status of a subject (profile).

    Only FULLY_REGISTERED is written by the orchestrator; the other values
    are set by the signup/payment flow or by the operator reset.
    """

    PAYMENT_PENDING = "payment_pending"
    PAYMENT_COMPLETE = "payment_complete"
    CARE_TEAM_ASSIGNED = "care_team_assigned"
    PROFILE_COMPLETE = "profile_complete"
    NOTIFICATIONS_SENT = "notifications_sent"
    FULLY_REGISTERED = "fully_registered"
