"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.care_team import (
    CareTeamAssignment,
    CareTeamRoom,
    CareTeamRoomMember,
    DefaultCareTeam,
)
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    CuidTimestampModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.profile import ProfessionalDetails, Profile
from app.infrastructure.persistence.models.registration_task import RegistrationTask
from app.infrastructure.persistence.models.subject_lease import SubjectLease

__all__ = [
    "CareTeamAssignment",
    "CareTeamRoom",
    "CareTeamRoomMember",
    "CuidMixin",
    "CuidTimestampModel",
    "DefaultCareTeam",
    "ProfessionalDetails",
    "Profile",
    "RegistrationTask",
    "SubjectLease",
    "TimestampMixin",
]
