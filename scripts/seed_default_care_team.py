"""Configure the default care team assigned to new patients.

Usage:
    python -m scripts.seed_default_care_team <doctor_id> [nutritionist_id]
Deactivates any previously active default care team, then inserts the new one.
Requires DATABASE_URL and the schema (alembic upgrade head).
"""

import asyncio
import sys

from sqlalchemy import update

import app.infrastructure.persistence.database as database
from app.core.config import get_settings
from app.infrastructure.persistence.models import DefaultCareTeam


async def main() -> None:
    """Replace the active default care team."""
    if len(sys.argv) < 2:
        print(
            "Usage: python -m scripts.seed_default_care_team <doctor_id> [nutritionist_id]",
            file=sys.stderr,
        )
        sys.exit(1)
    doctor_id = sys.argv[1]
    nutritionist_id = sys.argv[2] if len(sys.argv) > 2 else None

    get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            await session.execute(
                update(DefaultCareTeam)
                .where(DefaultCareTeam.is_active.is_(True))
                .values(is_active=False)
            )
            team = DefaultCareTeam(
                doctor_id=doctor_id, nutritionist_id=nutritionist_id, is_active=True
            )
            session.add(team)
            await session.flush()
            print(
                f"Default care team {team.id}: doctor={doctor_id} "
                f"nutritionist={nutritionist_id or '-'}"
            )
    await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
