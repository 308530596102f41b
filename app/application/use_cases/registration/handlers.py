"""Registration task handlers: one per task type.

Every handler re-checks the target state before acting (idempotent), returns
SkippedResult when the task does not apply to the subject's role, and raises a
TaskHandlerException (or lets a collaborator error propagate) on failure. The
runner is the only place that turns those errors into task state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.application.dtos.care_team import WelcomeNotification
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
    TaskResultPayload,
    WelcomeNotificationResult,
)

if TYPE_CHECKING:
    from app.application.dtos.registration import RegistrationTaskResult
    from app.application.interfaces.repositories import ICareTeamStore, IProfileStore
    from app.application.interfaces.services import (
        INotificationDispatchService,
        IRoomProvisioningService,
        ITaskHandler,
    )

logger = logging.getLogger(__name__)

PATIENT_WELCOME_TEMPLATE = "patient_welcome"
PROFESSIONAL_WELCOME_TEMPLATE = "professional_welcome"

_NOT_A_PATIENT = "Not applicable for professionals"


class AssignCareTeamHandler:
    """Assigns the default care team to a patient."""

    task_type = TaskType.ASSIGN_CARE_TEAM.value

    def __init__(self, profile_store: IProfileStore, care_team_store: ICareTeamStore) -> None:
        self._profile_store = profile_store
        self._care_team_store = care_team_store

    async def handle(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        role = await self._profile_store.get_role(subject_id)
        if role is not UserRole.PATIENT:
            return SkippedResult(reason=_NOT_A_PATIENT)

        existing = await self._care_team_store.get_assignment(subject_id)
        if existing is not None:
            logger.info("Care team already assigned for %s (assignment=%s)", subject_id, existing.id)
            return CareTeamAssignedResult(
                assignment_id=existing.id,
                doctor_id=existing.doctor_id,
                nutritionist_id=existing.nutritionist_id,
                already_assigned=True,
            )

        config = await self._care_team_store.get_default_care_team_config()
        if config is None:
            raise DefaultCareTeamNotConfiguredException()

        assignment = await self._care_team_store.create_assignment(
            subject_id, config.doctor_id, config.nutritionist_id
        )
        logger.info(
            "Assigned care team to %s: doctor=%s nutritionist=%s",
            subject_id,
            assignment.doctor_id,
            assignment.nutritionist_id,
        )
        return CareTeamAssignedResult(
            assignment_id=assignment.id,
            doctor_id=assignment.doctor_id,
            nutritionist_id=assignment.nutritionist_id,
        )


class CreateChatRoomHandler:
    """Provisions the patient's care team chat room.

    Requires the care team assignment to exist already. Its absence is a
    failure, not a skip: the task is retried once assign_care_team lands.
    """

    task_type = TaskType.CREATE_CHAT_ROOM.value

    def __init__(
        self,
        profile_store: IProfileStore,
        care_team_store: ICareTeamStore,
        room_service: IRoomProvisioningService,
    ) -> None:
        self._profile_store = profile_store
        self._care_team_store = care_team_store
        self._room_service = room_service

    async def handle(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        role = await self._profile_store.get_role(subject_id)
        if role is not UserRole.PATIENT:
            return SkippedResult(reason=_NOT_A_PATIENT)

        assignment = await self._care_team_store.get_assignment(subject_id)
        if assignment is None:
            raise PrerequisiteNotMetException(
                self.task_type, subject_id, "no care team assignment found"
            )

        room = await self._room_service.get_or_create_care_team_room(subject_id)
        logger.info(
            "Care team room %s for %s (created=%s)", room.room_id, subject_id, room.created
        )
        return ChatRoomResult(room_id=room.room_id, created=room.created)


class SendWelcomeNotificationHandler:
    """Sends the patient or professional welcome notification."""

    task_type = TaskType.SEND_WELCOME_NOTIFICATION.value

    def __init__(
        self,
        profile_store: IProfileStore,
        care_team_store: ICareTeamStore,
        dispatcher: INotificationDispatchService,
    ) -> None:
        self._profile_store = profile_store
        self._care_team_store = care_team_store
        self._dispatcher = dispatcher

    async def handle(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        profile = await self._profile_store.get_profile(subject_id)
        if profile is None:
            raise PrerequisiteNotMetException(self.task_type, subject_id, "profile not found")
        if not profile.email:
            raise PrerequisiteNotMetException(
                self.task_type, subject_id, "no contact email on profile"
            )

        doctor_name: str | None = None
        nutritionist_name: str | None = None
        if profile.role is UserRole.PATIENT:
            assignment = await self._care_team_store.get_assignment(subject_id)
            if assignment is None:
                raise PrerequisiteNotMetException(
                    self.task_type, subject_id, "care team not resolved"
                )
            doctor_name = await self._member_name(assignment.doctor_id)
            if assignment.nutritionist_id:
                nutritionist_name = await self._member_name(assignment.nutritionist_id)
            template = PATIENT_WELCOME_TEMPLATE
            registration_type = "patient"
        else:
            template = PROFESSIONAL_WELCOME_TEMPLATE
            registration_type = "professional"

        notification = WelcomeNotification(
            subject_id=subject_id,
            template=template,
            registration_type=registration_type,
            role=profile.role,
            email=profile.email,
            phone=profile.phone,
            full_name=profile.full_name,
            doctor_name=doctor_name,
            nutritionist_name=nutritionist_name,
            idempotency_key=task.id,
        )
        logger.info("Sending %s to %s", template, subject_id)
        result = await self._dispatcher.send_welcome_notification(notification)
        if not result.delivered:
            raise NotificationDeliveryException(subject_id, template, result.detail)
        return WelcomeNotificationResult(template=template, recipient=profile.email)

    async def _member_name(self, user_id: str) -> str | None:
        member = await self._profile_store.get_profile(user_id)
        if member is None:
            return None
        return member.full_name or None


class SetupProfessionalProfileHandler:
    """Creates the professional details record for doctors and nutritionists."""

    task_type = TaskType.SETUP_PROFESSIONAL_PROFILE.value

    def __init__(self, profile_store: IProfileStore) -> None:
        self._profile_store = profile_store

    async def handle(
        self, subject_id: str, task: RegistrationTaskResult
    ) -> TaskResultPayload:
        role = await self._profile_store.get_role(subject_id)
        if role is None or not role.is_professional:
            return SkippedResult(reason="Not applicable for non-professional roles")
        created = await self._profile_store.ensure_professional_details(subject_id, role)
        return ProfessionalProfileResult(role=role.value, created=created)


def build_task_handlers(
    profile_store: IProfileStore,
    care_team_store: ICareTeamStore,
    room_service: IRoomProvisioningService,
    dispatcher: INotificationDispatchService,
) -> dict[str, ITaskHandler]:
    """Return the handler registry keyed by task type."""
    handlers: list[ITaskHandler] = [
        AssignCareTeamHandler(profile_store, care_team_store),
        CreateChatRoomHandler(profile_store, care_team_store, room_service),
        SendWelcomeNotificationHandler(profile_store, care_team_store, dispatcher),
        SetupProfessionalProfileHandler(profile_store),
    ]
    return {h.task_type: h for h in handlers}
