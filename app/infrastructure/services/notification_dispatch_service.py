"""Welcome notification dispatch: HTTP webhook sender and log-only fallback."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.application.dtos.care_team import NotificationDispatchResult, WelcomeNotification
from app.infrastructure.exceptions import ExternalServiceException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


def _notification_body(notification: WelcomeNotification) -> dict[str, Any]:
    """JSON body posted to the notification webhook."""
    return {
        "userId": notification.subject_id,
        "template": notification.template,
        "registrationType": notification.registration_type,
        "role": notification.role.value,
        "email": notification.email,
        "phone": notification.phone,
        "fullName": notification.full_name,
        "doctorName": notification.doctor_name,
        "nutritionistName": notification.nutritionist_name,
    }


class HttpNotificationDispatchService:
    """INotificationDispatchService that POSTs to the notification webhook.

    2xx means delivered. A 4xx response is reported as not delivered (the
    handler turns that into a retryable task failure); network errors and 5xx
    raise ExternalServiceException.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        webhook_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._webhook_url = webhook_url
        self._token = token
        self._timeout_seconds = timeout_seconds

    async def send_welcome_notification(
        self, notification: WelcomeNotification
    ) -> NotificationDispatchResult:
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if notification.idempotency_key:
            headers[IDEMPOTENCY_HEADER] = notification.idempotency_key
        try:
            response = await self._client.post(
                self._webhook_url,
                json=_notification_body(notification),
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Notification webhook request failed for %s: %s",
                notification.subject_id,
                exc,
            )
            raise ExternalServiceException("notification_webhook", str(exc)) from exc

        if response.status_code >= 500:
            raise ExternalServiceException(
                "notification_webhook",
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            logger.warning(
                "Notification webhook rejected %s for %s: HTTP %d",
                notification.template,
                notification.subject_id,
                response.status_code,
            )
            return NotificationDispatchResult(
                delivered=False, detail=f"HTTP {response.status_code}: {response.text[:200]}"
            )
        return NotificationDispatchResult(delivered=True)


class LogOnlyNotificationDispatchService:
    """INotificationDispatchService that logs instead of sending.

    Use when no webhook is configured. Reports delivered=True so onboarding can
    converge in development.
    """

    async def send_welcome_notification(
        self, notification: WelcomeNotification
    ) -> NotificationDispatchResult:
        logger.info(
            "Welcome notify: would send %s to %s (role=%s)",
            notification.template,
            notification.subject_id,
            notification.role.value,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Welcome notify body: %s", _notification_body(notification))
        return NotificationDispatchResult(delivered=True, detail="logged")
