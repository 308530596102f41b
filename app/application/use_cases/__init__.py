"""Application use cases: one entry point per workflow."""

from app.application.use_cases.registration import (
    EnqueueRegistrationTasksUseCase,
    GetRegistrationProgressUseCase,
    ProcessRegistrationTasksUseCase,
    ResetRegistrationTasksUseCase,
)

__all__ = [
    "EnqueueRegistrationTasksUseCase",
    "GetRegistrationProgressUseCase",
    "ProcessRegistrationTasksUseCase",
    "ResetRegistrationTasksUseCase",
]
