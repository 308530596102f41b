"""Subject lease ORM model. Grants one runner exclusive processing of a subject until expiry."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base


class SubjectLease(Base):
    """Per-subject processing lease with TTL. Table: subject_lease."""

    __tablename__ = "subject_lease"

    subject_id: Mapped[str] = mapped_column(String, primary_key=True)
    owner: Mapped[str] = mapped_column(String, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
