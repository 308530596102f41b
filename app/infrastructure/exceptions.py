"""Infrastructure exceptions for external operations.

These extend OnboardingException so presentation can map them to HTTP
responses consistently and the task runner can persist them as task errors.
"""

from app.domain.exceptions import OnboardingException


class ExternalServiceException(OnboardingException):
    """Call to an external service (e.g. the notification webhook) failed."""

    def __init__(self, service: str, reason: str, status_code: int | None = None) -> None:
        details: dict[str, object] = {"service": service, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"External service '{service}' failed: {reason}",
            "EXTERNAL_SERVICE_ERROR",
            details,
        )
