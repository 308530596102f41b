"""Repositories: SQL implementations of the application store ports."""

from app.infrastructure.persistence.repositories.care_team_repo import CareTeamRepository
from app.infrastructure.persistence.repositories.profile_repo import ProfileRepository
from app.infrastructure.persistence.repositories.registration_task_repo import (
    RegistrationTaskRepository,
)
from app.infrastructure.persistence.repositories.subject_lease_repo import (
    SubjectLeaseRepository,
)

__all__ = [
    "CareTeamRepository",
    "ProfileRepository",
    "RegistrationTaskRepository",
    "SubjectLeaseRepository",
]
