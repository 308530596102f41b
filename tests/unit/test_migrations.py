"""Static checks on the Alembic revision chain (no database needed)."""

import re
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

import app.infrastructure.persistence.models  # noqa: F401  (registers models on Base.metadata)
from app.infrastructure.persistence.database import Base

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _script() -> ScriptDirectory:
    return ScriptDirectory.from_config(Config(str(ALEMBIC_INI)))


def test_revisions_form_a_single_chain() -> None:
    script = _script()

    assert len(script.get_heads()) == 1
    assert len(script.get_bases()) == 1


def test_revisions_create_every_model_table() -> None:
    created: set[str] = set()
    for revision in _script().walk_revisions():
        source = Path(revision.path).read_text()
        created |= set(re.findall(r'op\.create_table\(\s*"(\w+)"', source))

    assert created == set(Base.metadata.tables)


def test_revisions_declare_every_named_index_and_constraint() -> None:
    sources = "\n".join(Path(r.path).read_text() for r in _script().walk_revisions())
    names = {
        item.name
        for table in Base.metadata.tables.values()
        for item in (*table.indexes, *table.constraints)
        if isinstance(item.name, str) and item.name
    }

    assert "uq_registration_task_subject_type" in names
    missing = sorted(name for name in names if f"\"{name}\"" not in sources)
    assert missing == []
