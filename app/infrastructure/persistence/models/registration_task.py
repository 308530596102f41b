"""Registration task ORM model. One row per (subject, task type) in the post-registration queue."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidTimestampModel


class RegistrationTask(CuidTimestampModel, Base):
    """Durable post-registration task. Table: registration_task.

    status moves pending -> in_progress -> completed | pending (retry) | failed.
    Rows are never deleted by the orchestrator.
    """

    __tablename__ = "registration_task"

    subject_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    task_type: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", server_default="pending"
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    retry_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    next_retry_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    error_details: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )
    result_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("subject_id", "task_type", name="uq_registration_task_subject_type"),
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'failed')",
            name="ck_registration_task_status",
        ),
        CheckConstraint("retry_count >= 0", name="ck_registration_task_retry_count"),
        Index("ix_registration_task_subject_status", "subject_id", "status"),
        Index("ix_registration_task_status_next_retry", "status", "next_retry_at"),
    )
