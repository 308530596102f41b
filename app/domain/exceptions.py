"""Domain exceptions for the onboarding service.

Defines domain-level exceptions that represent business rule violations and
task handler failures. These exceptions are independent of infrastructure
concerns. Presentation layer maps them to HTTP responses in exception
handlers; the task runner persists them as a task's error details.
"""

from typing import Any


class OnboardingException(Exception):
    """Base exception for all onboarding service errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(OnboardingException):
    """Raised when input validation fails (e.g. missing subject id)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(OnboardingException):
    """Raised when the caller did not present a valid API key."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(OnboardingException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'profile', 'registration_task').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(OnboardingException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class TaskHandlerException(OnboardingException):
    """Base for failures raised by registration task handlers.

    The runner catches these (and any other exception) per task and records
    them as the task's error details; they never abort sibling tasks.
    """


class PrerequisiteNotMetException(TaskHandlerException):
    """Raised when a handler's required prior state does not exist yet."""

    def __init__(self, task_type: str, subject_id: str, reason: str) -> None:
        """Initialize with task, subject, and the missing prerequisite.

        Args:
            task_type: Task whose prerequisite is missing.
            subject_id: Subject being onboarded.
            reason: Human-readable description of what is missing.
        """
        super().__init__(
            f"Prerequisite not met for {task_type}: {reason}",
            "PREREQUISITE_NOT_MET",
            {"task_type": task_type, "subject_id": subject_id, "reason": reason},
        )


class DefaultCareTeamNotConfiguredException(TaskHandlerException):
    """Raised when no active default care team is configured."""

    def __init__(self) -> None:
        super().__init__(
            "No active default care team found",
            "DEFAULT_CARE_TEAM_NOT_CONFIGURED",
        )


class CareTeamAssignmentException(TaskHandlerException):
    """Raised when writing a care team assignment fails."""

    def __init__(self, subject_id: str, reason: str) -> None:
        super().__init__(
            f"Care team assignment failed: {reason}",
            "CARE_TEAM_ASSIGNMENT_FAILED",
            {"subject_id": subject_id, "reason": reason},
        )


class NotificationDeliveryException(TaskHandlerException):
    """Raised when the notification dispatcher reports the message was not delivered."""

    def __init__(self, subject_id: str, template: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"subject_id": subject_id, "template": template}
        if reason:
            details["reason"] = reason
        super().__init__(
            f"Notification failed: {template} was not delivered",
            "NOTIFICATION_NOT_DELIVERED",
            details,
        )


class HandlerTimeoutException(TaskHandlerException):
    """Raised when a handler does not finish within the configured timeout."""

    def __init__(self, task_type: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Task {task_type} timed out after {timeout_seconds} seconds",
            "HANDLER_TIMEOUT",
            {"task_type": task_type, "timeout_seconds": timeout_seconds},
        )


class UnknownTaskTypeException(TaskHandlerException):
    """Raised when no handler is registered for a task type."""

    def __init__(self, task_type: str) -> None:
        super().__init__(
            f"No processor found for task type: {task_type}",
            "UNKNOWN_TASK_TYPE",
            {"task_type": task_type},
        )
