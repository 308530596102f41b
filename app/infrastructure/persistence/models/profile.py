"""Profile ORM model. The registering user and their onboarding status."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampMixin


class Profile(TimestampMixin, Base):
    """User profile. Table: profile. id is the auth user id (not generated here)."""

    __tablename__ = "profile"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    registration_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="payment_pending",
        server_default="payment_pending",
    )
    registration_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "registration_status IN ('payment_pending', 'payment_complete', "
            "'care_team_assigned', 'profile_complete', 'notifications_sent', "
            "'fully_registered')",
            name="ck_profile_registration_status",
        ),
    )


class ProfessionalDetails(TimestampMixin, Base):
    """Professional (doctor/nutritionist) details row. Table: professional_details."""

    __tablename__ = "professional_details"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
