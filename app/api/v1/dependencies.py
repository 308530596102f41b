"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for stores and application use cases. All use
cases are built from infrastructure implementations here; routes depend only
on these dependencies, not on infra directly. Orchestrator tuning is read
from Settings once here and passed into constructors.

The build_* functions are plain so the retry sweep script can compose the
same object graph outside a request.
"""

from __future__ import annotations

import hmac
from typing import Annotated

import httpx
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.interfaces.repositories import (
    ICareTeamStore,
    IProfileStore,
    IRegistrationTaskStore,
    ISubjectLeaseStore,
)
from app.application.interfaces.services import (
    INotificationDispatchService,
    IRoomProvisioningService,
)
from app.application.use_cases.registration import (
    ConvergenceChecker,
    EnqueueRegistrationTasksUseCase,
    GetRegistrationProgressUseCase,
    ProcessRegistrationTasksUseCase,
    RegistrationTaskRunner,
    ResetRegistrationTasksUseCase,
    build_task_handlers,
)
from app.core.config import Settings, get_settings
from app.domain.exceptions import AuthenticationException
from app.domain.value_objects.retry_policy import RetryPolicy
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    CareTeamRepository,
    ProfileRepository,
    RegistrationTaskRepository,
    SubjectLeaseRepository,
)
from app.infrastructure.services import (
    HttpNotificationDispatchService,
    LogOnlyNotificationDispatchService,
    SqlRoomProvisioningService,
)

SettingsDep = Annotated[Settings, Depends(get_settings)]


# ---------------------------------------------------------------------------
# Plain builders (shared with scripts)
# ---------------------------------------------------------------------------


def build_retry_policy(settings: Settings) -> RetryPolicy:
    return RetryPolicy.from_seconds(
        settings.registration_max_retries,
        settings.registration_backoff_unit_seconds,
    )


def build_notification_dispatcher(
    settings: Settings, client: httpx.AsyncClient | None
) -> INotificationDispatchService:
    """Webhook dispatcher when NOTIFICATION_WEBHOOK_URL is set, else log-only."""
    if not settings.notification_webhook_url or client is None:
        return LogOnlyNotificationDispatchService()
    token = settings.notification_webhook_token
    return HttpNotificationDispatchService(
        client,
        settings.notification_webhook_url,
        token=token.get_secret_value() if token else None,
        timeout_seconds=settings.notification_timeout_seconds,
    )


def build_process_registration_tasks_use_case(
    settings: Settings,
    task_store: IRegistrationTaskStore,
    profile_store: IProfileStore,
    care_team_store: ICareTeamStore,
    lease_store: ISubjectLeaseStore,
    room_service: IRoomProvisioningService,
    dispatcher: INotificationDispatchService,
) -> ProcessRegistrationTasksUseCase:
    """Wire handlers, runner, convergence checker and lease into the trigger use case."""
    handlers = build_task_handlers(profile_store, care_team_store, room_service, dispatcher)
    runner = RegistrationTaskRunner(
        task_store,
        handlers,
        timeout_seconds=settings.registration_task_timeout_seconds,
    )
    checker = ConvergenceChecker(
        task_store,
        profile_store,
        requires_all_completed=settings.convergence_requires_all_completed,
    )
    return ProcessRegistrationTasksUseCase(
        runner,
        checker,
        lease_store,
        lease_ttl_seconds=settings.registration_lease_ttl_seconds,
    )


# ---------------------------------------------------------------------------
# Stores and services
# ---------------------------------------------------------------------------


def get_sql_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory; raises SqlNotConfiguredException (503) when DATABASE_URL is unset."""
    return get_session_factory()


SessionFactoryDep = Annotated[
    async_sessionmaker[AsyncSession], Depends(get_sql_session_factory)
]


def get_task_store(
    session_factory: SessionFactoryDep, settings: SettingsDep
) -> IRegistrationTaskStore:
    return RegistrationTaskRepository(session_factory, build_retry_policy(settings))


def get_profile_store(session_factory: SessionFactoryDep) -> IProfileStore:
    return ProfileRepository(session_factory)


def get_care_team_store(session_factory: SessionFactoryDep) -> ICareTeamStore:
    return CareTeamRepository(session_factory)


def get_lease_store(session_factory: SessionFactoryDep) -> ISubjectLeaseStore:
    return SubjectLeaseRepository(session_factory)


def get_room_service(session_factory: SessionFactoryDep) -> IRoomProvisioningService:
    return SqlRoomProvisioningService(session_factory)


def get_notification_dispatcher(
    request: Request, settings: SettingsDep
) -> INotificationDispatchService:
    """Dispatcher using the shared HTTP client created in lifespan."""
    client = getattr(request.app.state, "http_client", None)
    return build_notification_dispatcher(settings, client)


# ---------------------------------------------------------------------------
# Use cases
# ---------------------------------------------------------------------------


def get_process_registration_tasks_use_case(
    settings: SettingsDep,
    task_store: Annotated[IRegistrationTaskStore, Depends(get_task_store)],
    profile_store: Annotated[IProfileStore, Depends(get_profile_store)],
    care_team_store: Annotated[ICareTeamStore, Depends(get_care_team_store)],
    lease_store: Annotated[ISubjectLeaseStore, Depends(get_lease_store)],
    room_service: Annotated[IRoomProvisioningService, Depends(get_room_service)],
    dispatcher: Annotated[
        INotificationDispatchService, Depends(get_notification_dispatcher)
    ],
) -> ProcessRegistrationTasksUseCase:
    return build_process_registration_tasks_use_case(
        settings,
        task_store,
        profile_store,
        care_team_store,
        lease_store,
        room_service,
        dispatcher,
    )


def get_enqueue_registration_tasks_use_case(
    task_store: Annotated[IRegistrationTaskStore, Depends(get_task_store)],
    profile_store: Annotated[IProfileStore, Depends(get_profile_store)],
) -> EnqueueRegistrationTasksUseCase:
    return EnqueueRegistrationTasksUseCase(task_store, profile_store)


def get_reset_registration_tasks_use_case(
    settings: SettingsDep,
    task_store: Annotated[IRegistrationTaskStore, Depends(get_task_store)],
    profile_store: Annotated[IProfileStore, Depends(get_profile_store)],
    process_use_case: Annotated[
        ProcessRegistrationTasksUseCase,
        Depends(get_process_registration_tasks_use_case),
    ],
) -> ResetRegistrationTasksUseCase:
    return ResetRegistrationTasksUseCase(
        task_store,
        profile_store,
        process_use_case,
        stuck_after_seconds=settings.registration_stuck_after_seconds,
    )


def get_registration_progress_use_case(
    task_store: Annotated[IRegistrationTaskStore, Depends(get_task_store)],
    profile_store: Annotated[IProfileStore, Depends(get_profile_store)],
) -> GetRegistrationProgressUseCase:
    return GetRegistrationProgressUseCase(task_store, profile_store)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def require_registration_api_key(
    settings: SettingsDep,
    x_api_key: Annotated[str | None, Header(alias="X-Api-Key")] = None,
) -> None:
    """Require X-Api-Key when REGISTRATION_API_KEY is configured (constant-time compare)."""
    expected = settings.registration_api_key
    if expected is None or not expected.get_secret_value():
        return
    if not x_api_key or not hmac.compare_digest(
        x_api_key.encode(), expected.get_secret_value().encode()
    ):
        raise AuthenticationException("Invalid or missing API key")
