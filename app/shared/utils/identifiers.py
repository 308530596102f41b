"""Subject ID format validation.

Used by the registration use cases so invalid subject IDs are rejected before
any store is touched.
"""

import re

# CUID/UUID-style: alphanumeric, hyphen, underscore.
SUBJECT_ID_MAX_LENGTH = 64
SUBJECT_ID_PATTERN = r"^[a-zA-Z0-9_-]{1," + str(SUBJECT_ID_MAX_LENGTH) + r"}$"
_SUBJECT_ID_RE = re.compile(SUBJECT_ID_PATTERN)


def is_valid_subject_id_format(value: str | None) -> bool:
    """Return True if value is a non-empty, well-formed subject id."""
    if not value or len(value) > SUBJECT_ID_MAX_LENGTH:
        return False
    return bool(_SUBJECT_ID_RE.fullmatch(value))
