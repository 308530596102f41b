"""Unit tests for welcome notification dispatchers (httpx MockTransport, no network)."""

import httpx
import pytest

from app.application.dtos.care_team import WelcomeNotification
from app.domain.enums import UserRole
from app.infrastructure.exceptions import ExternalServiceException
from app.infrastructure.services.notification_dispatch_service import (
    IDEMPOTENCY_HEADER,
    HttpNotificationDispatchService,
    LogOnlyNotificationDispatchService,
)

WEBHOOK_URL = "https://notify.example.com/welcome"

NOTIFICATION = WelcomeNotification(
    subject_id="patient-1",
    template="patient_welcome",
    registration_type="patient",
    role=UserRole.PATIENT,
    email="jane@example.com",
    phone=None,
    full_name="Jane Doe",
    doctor_name="Ada Okello",
    idempotency_key="task-3",
)


def _service(handler, token: str | None = None) -> HttpNotificationDispatchService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpNotificationDispatchService(client, WEBHOOK_URL, token=token)


async def test_posts_camel_case_body_with_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    result = await _service(handler, token="s3cret").send_welcome_notification(NOTIFICATION)

    assert result.delivered is True
    request = seen[0]
    assert str(request.url) == WEBHOOK_URL
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert request.headers[IDEMPOTENCY_HEADER] == "task-3"
    body = httpx.Response(200, content=request.content).json()
    assert body["userId"] == "patient-1"
    assert body["registrationType"] == "patient"
    assert body["doctorName"] == "Ada Okello"
    assert body["nutritionistName"] is None


async def test_client_error_is_not_delivered() -> None:
    result = await _service(
        lambda request: httpx.Response(422, text="invalid email")
    ).send_welcome_notification(NOTIFICATION)

    assert result.delivered is False
    assert result.detail == "HTTP 422: invalid email"


async def test_server_error_raises_external_service_exception() -> None:
    with pytest.raises(ExternalServiceException) as exc_info:
        await _service(lambda request: httpx.Response(503)).send_welcome_notification(
            NOTIFICATION
        )
    assert exc_info.value.details["status_code"] == 503


async def test_transport_error_raises_external_service_exception() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalServiceException, match="connection refused"):
        await _service(handler).send_welcome_notification(NOTIFICATION)


async def test_log_only_dispatcher_reports_delivered() -> None:
    result = await LogOnlyNotificationDispatchService().send_welcome_notification(NOTIFICATION)
    assert result.delivered is True
