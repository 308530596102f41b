"""Post-registration task orchestration: handlers, runner, convergence, trigger, and operator tools."""

from app.application.use_cases.registration.convergence import ConvergenceChecker
from app.application.use_cases.registration.enqueue_registration_tasks import (
    EnqueueRegistrationTasksUseCase,
    default_tasks_for_role,
)
from app.application.use_cases.registration.get_registration_progress import (
    GetRegistrationProgressUseCase,
)
from app.application.use_cases.registration.handlers import (
    AssignCareTeamHandler,
    CreateChatRoomHandler,
    SendWelcomeNotificationHandler,
    SetupProfessionalProfileHandler,
    build_task_handlers,
)
from app.application.use_cases.registration.process_registration_tasks import (
    ProcessRegistrationTasksUseCase,
    validate_subject_id,
)
from app.application.use_cases.registration.reset_registration_tasks import (
    ResetRegistrationTasksUseCase,
)
from app.application.use_cases.registration.task_runner import RegistrationTaskRunner

__all__ = [
    "AssignCareTeamHandler",
    "ConvergenceChecker",
    "CreateChatRoomHandler",
    "EnqueueRegistrationTasksUseCase",
    "GetRegistrationProgressUseCase",
    "ProcessRegistrationTasksUseCase",
    "RegistrationTaskRunner",
    "ResetRegistrationTasksUseCase",
    "SendWelcomeNotificationHandler",
    "SetupProfessionalProfileHandler",
    "build_task_handlers",
    "default_tasks_for_role",
    "validate_subject_id",
]
