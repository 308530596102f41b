"""Unit tests for registration task handlers (applicability, idempotency, prerequisites)."""

from unittest.mock import AsyncMock

import pytest

from app.application.use_cases.registration.handlers import (
    PATIENT_WELCOME_TEMPLATE,
    PROFESSIONAL_WELCOME_TEMPLATE,
    AssignCareTeamHandler,
    CreateChatRoomHandler,
    SendWelcomeNotificationHandler,
    SetupProfessionalProfileHandler,
    build_task_handlers,
)
from app.domain.enums import TaskType, UserRole
from app.domain.exceptions import (
    DefaultCareTeamNotConfiguredException,
    NotificationDeliveryException,
    PrerequisiteNotMetException,
)
from app.domain.value_objects.task_payloads import (
    CareTeamAssignedResult,
    ChatRoomResult,
    ProfessionalProfileResult,
    SkippedResult,
    WelcomeNotificationResult,
)
from tests.conftest import DOCTOR_ID, NUTRITIONIST_ID
from tests.fakes import InMemoryCareTeamStore, RecordingDispatcher

PATIENT_ID = "patient-1"


def _task(task_store, task_type: TaskType, subject_id: str = PATIENT_ID):
    return task_store.add(subject_id, task_type.value)


async def test_assign_care_team_uses_default_config(
    task_store, profile_store, care_team_store
) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = AssignCareTeamHandler(profile_store, care_team_store)

    result = await handler.handle(PATIENT_ID, _task(task_store, TaskType.ASSIGN_CARE_TEAM))

    assert isinstance(result, CareTeamAssignedResult)
    assert result.doctor_id == DOCTOR_ID
    assert result.nutritionist_id == NUTRITIONIST_ID
    assert result.already_assigned is False
    assert care_team_store.assignments[PATIENT_ID].doctor_id == DOCTOR_ID


async def test_assign_care_team_is_idempotent(
    task_store, profile_store, care_team_store
) -> None:
    """A second run returns the existing assignment without writing again."""
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = AssignCareTeamHandler(profile_store, care_team_store)
    task = _task(task_store, TaskType.ASSIGN_CARE_TEAM)

    first = await handler.handle(PATIENT_ID, task)
    second = await handler.handle(PATIENT_ID, task)

    assert care_team_store.create_calls == 1
    assert second.already_assigned is True
    assert second.assignment_id == first.assignment_id


async def test_assign_care_team_skips_non_patient_without_touching_care_team(
    task_store, profile_store
) -> None:
    profile_store.add("doc-2", UserRole.DOCTOR)
    care_team_store = AsyncMock()
    handler = AssignCareTeamHandler(profile_store, care_team_store)

    result = await handler.handle("doc-2", _task(task_store, TaskType.ASSIGN_CARE_TEAM, "doc-2"))

    assert result == SkippedResult(reason="Not applicable for professionals")
    care_team_store.get_assignment.assert_not_called()
    care_team_store.create_assignment.assert_not_called()


async def test_assign_care_team_skips_subject_without_role(task_store, profile_store) -> None:
    care_team_store = AsyncMock()
    handler = AssignCareTeamHandler(profile_store, care_team_store)

    result = await handler.handle("ghost", _task(task_store, TaskType.ASSIGN_CARE_TEAM, "ghost"))

    assert isinstance(result, SkippedResult)
    care_team_store.create_assignment.assert_not_called()


async def test_assign_care_team_fails_without_default_team(task_store, profile_store) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = AssignCareTeamHandler(profile_store, InMemoryCareTeamStore(None))

    with pytest.raises(DefaultCareTeamNotConfiguredException):
        await handler.handle(PATIENT_ID, _task(task_store, TaskType.ASSIGN_CARE_TEAM))


async def test_create_chat_room_requires_assignment(
    task_store, profile_store, care_team_store, room_service
) -> None:
    """Missing assignment is a failure (retried later), not a skip."""
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = CreateChatRoomHandler(profile_store, care_team_store, room_service)

    with pytest.raises(PrerequisiteNotMetException) as exc_info:
        await handler.handle(PATIENT_ID, _task(task_store, TaskType.CREATE_CHAT_ROOM))

    assert exc_info.value.details["reason"] == "no care team assignment found"
    assert room_service.rooms == {}


async def test_create_chat_room_returns_existing_room(
    task_store, profile_store, care_team_store, room_service
) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    await care_team_store.create_assignment(PATIENT_ID, DOCTOR_ID)
    handler = CreateChatRoomHandler(profile_store, care_team_store, room_service)
    task = _task(task_store, TaskType.CREATE_CHAT_ROOM)

    first = await handler.handle(PATIENT_ID, task)
    second = await handler.handle(PATIENT_ID, task)

    assert first == ChatRoomResult(room_id=f"room-{PATIENT_ID}", created=True)
    assert second == ChatRoomResult(room_id=f"room-{PATIENT_ID}", created=False)


async def test_create_chat_room_skips_professional(
    task_store, profile_store, care_team_store
) -> None:
    room_service = AsyncMock()
    handler = CreateChatRoomHandler(profile_store, care_team_store, room_service)

    result = await handler.handle(
        DOCTOR_ID, _task(task_store, TaskType.CREATE_CHAT_ROOM, DOCTOR_ID)
    )

    assert isinstance(result, SkippedResult)
    room_service.get_or_create_care_team_room.assert_not_called()


async def test_patient_welcome_includes_care_team_names(
    task_store, profile_store, care_team_store, dispatcher
) -> None:
    profile_store.add(
        PATIENT_ID, UserRole.PATIENT, first_name="Jane", last_name="Doe", email="jane@example.com"
    )
    await care_team_store.create_assignment(PATIENT_ID, DOCTOR_ID, NUTRITIONIST_ID)
    handler = SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher)
    task = _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION)

    result = await handler.handle(PATIENT_ID, task)

    assert result == WelcomeNotificationResult(
        template=PATIENT_WELCOME_TEMPLATE, recipient="jane@example.com"
    )
    sent = dispatcher.sent[0]
    assert sent.full_name == "Jane Doe"
    assert sent.doctor_name == "Ada Okello"
    assert sent.nutritionist_name == "Ben Mugisha"
    assert sent.registration_type == "patient"
    assert sent.idempotency_key == task.id


async def test_patient_welcome_waits_for_care_team(
    task_store, profile_store, care_team_store, dispatcher
) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher)

    with pytest.raises(PrerequisiteNotMetException):
        await handler.handle(PATIENT_ID, _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION))

    assert dispatcher.sent == []


async def test_professional_welcome_uses_professional_template(
    task_store, profile_store, care_team_store, dispatcher
) -> None:
    handler = SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher)

    result = await handler.handle(
        DOCTOR_ID, _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION, DOCTOR_ID)
    )

    assert result.template == PROFESSIONAL_WELCOME_TEMPLATE
    assert dispatcher.sent[0].registration_type == "professional"
    assert dispatcher.sent[0].doctor_name is None


async def test_welcome_fails_without_profile(
    task_store, profile_store, care_team_store, dispatcher
) -> None:
    handler = SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher)

    with pytest.raises(PrerequisiteNotMetException, match="profile not found"):
        await handler.handle("ghost", _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION, "ghost"))


async def test_welcome_fails_without_email(
    task_store, profile_store, care_team_store, dispatcher
) -> None:
    profile_store.add("rec-1", UserRole.RECEPTION, email=None)
    handler = SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher)

    with pytest.raises(PrerequisiteNotMetException, match="no contact email"):
        await handler.handle("rec-1", _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION, "rec-1"))


async def test_welcome_not_delivered_raises(
    task_store, profile_store, care_team_store
) -> None:
    handler = SendWelcomeNotificationHandler(
        profile_store, care_team_store, RecordingDispatcher(delivered=False)
    )

    with pytest.raises(NotificationDeliveryException):
        await handler.handle(
            DOCTOR_ID, _task(task_store, TaskType.SEND_WELCOME_NOTIFICATION, DOCTOR_ID)
        )


async def test_setup_professional_profile_creates_once(task_store, profile_store) -> None:
    handler = SetupProfessionalProfileHandler(profile_store)
    task = _task(task_store, TaskType.SETUP_PROFESSIONAL_PROFILE, NUTRITIONIST_ID)

    first = await handler.handle(NUTRITIONIST_ID, task)
    second = await handler.handle(NUTRITIONIST_ID, task)

    assert first == ProfessionalProfileResult(role="nutritionist", created=True)
    assert second == ProfessionalProfileResult(role="nutritionist", created=False)


async def test_setup_professional_profile_skips_patient(task_store, profile_store) -> None:
    profile_store.add(PATIENT_ID, UserRole.PATIENT)
    handler = SetupProfessionalProfileHandler(profile_store)

    result = await handler.handle(
        PATIENT_ID, _task(task_store, TaskType.SETUP_PROFESSIONAL_PROFILE)
    )

    assert isinstance(result, SkippedResult)
    assert PATIENT_ID not in profile_store.professional_details


def test_build_task_handlers_registers_every_task_type(
    profile_store, care_team_store, room_service, dispatcher
) -> None:
    handlers = build_task_handlers(profile_store, care_team_store, room_service, dispatcher)
    assert sorted(handlers) == sorted(TaskType.values())
