"""Shared utilities: datetime, generators, identifiers."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid
from app.shared.utils.identifiers import is_valid_subject_id_format

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_valid_subject_id_format",
]
