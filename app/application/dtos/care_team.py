"""DTOs for collaborator data: profiles, care teams, rooms, notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import RegistrationStatus, UserRole


@dataclass(frozen=True)
class SubjectProfile:
    """Profile of a user being onboarded (or a care team member)."""

    id: str
    role: UserRole
    first_name: str | None
    last_name: str | None
    email: str | None
    phone: str | None
    registration_status: RegistrationStatus
    registration_completed_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class CareTeamAssignment:
    """Doctor (and optional nutritionist) assigned to a patient."""

    id: str
    patient_id: str
    doctor_id: str
    nutritionist_id: str | None


@dataclass(frozen=True)
class DefaultCareTeamConfig:
    """Administrator-configured fallback care team."""

    doctor_id: str
    nutritionist_id: str | None


@dataclass(frozen=True)
class CareTeamRoom:
    """Care team chat room. created is False when an existing room was returned."""

    room_id: str
    patient_id: str
    created: bool


@dataclass(frozen=True)
class WelcomeNotification:
    """Payload handed to the notification dispatcher."""

    subject_id: str
    template: str
    registration_type: str
    role: UserRole
    email: str
    phone: str | None
    full_name: str
    doctor_name: str | None = None
    nutritionist_name: str | None = None
    # Task id; lets the channel drop a resend after a crash between send and mark_completed.
    idempotency_key: str | None = None


@dataclass(frozen=True)
class NotificationDispatchResult:
    """Dispatcher response."""

    delivered: bool
    detail: str | None = None
