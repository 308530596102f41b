"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import RegistrationStatus, TaskStatus, TaskType, UserRole
from app.domain.exceptions import (
    DefaultCareTeamNotConfiguredException,
    HandlerTimeoutException,
    NotificationDeliveryException,
    OnboardingException,
    PrerequisiteNotMetException,
    ResourceNotFoundException,
    TaskHandlerException,
    UnknownTaskTypeException,
    ValidationException,
)
from app.domain.value_objects import RetryPolicy, TaskErrorDetails

__all__ = [
    # Enums
    "RegistrationStatus",
    "TaskStatus",
    "TaskType",
    "UserRole",
    # Exceptions
    "DefaultCareTeamNotConfiguredException",
    "HandlerTimeoutException",
    "NotificationDeliveryException",
    "OnboardingException",
    "PrerequisiteNotMetException",
    "ResourceNotFoundException",
    "TaskHandlerException",
    "UnknownTaskTypeException",
    "ValidationException",
    # Value objects
    "RetryPolicy",
    "TaskErrorDetails",
]
