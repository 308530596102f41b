"""Application layer: interfaces, DTOs, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (task store, profile store, etc.).
"""

from app.application.interfaces import (
    ICareTeamStore,
    INotificationDispatchService,
    IProfileStore,
    IRegistrationTaskStore,
    IRoomProvisioningService,
    ISubjectLeaseStore,
    ITaskHandler,
)
from app.application.use_cases.registration import (
    ConvergenceChecker,
    EnqueueRegistrationTasksUseCase,
    GetRegistrationProgressUseCase,
    ProcessRegistrationTasksUseCase,
    RegistrationTaskRunner,
    ResetRegistrationTasksUseCase,
)

__all__ = [
    "ConvergenceChecker",
    "EnqueueRegistrationTasksUseCase",
    "GetRegistrationProgressUseCase",
    "ICareTeamStore",
    "INotificationDispatchService",
    "IProfileStore",
    "IRegistrationTaskStore",
    "IRoomProvisioningService",
    "ISubjectLeaseStore",
    "ITaskHandler",
    "ProcessRegistrationTasksUseCase",
    "RegistrationTaskRunner",
    "ResetRegistrationTasksUseCase",
]
