"""Retry sweep: process every subject whose registration tasks are due or stuck.

Usage:
    python -m scripts.run_registration_retry_sweep [--limit N] [--reset-stuck]
Run from cron (e.g. every minute). Only tasks whose backoff has elapsed
(next_retry_at <= now) are attempted; subjects held by another runner's
lease are skipped and picked up on the next sweep. With --reset-stuck the
sweep also selects subjects holding in_progress tasks not updated for
REGISTRATION_STUCK_AFTER_SECONDS (a runner crashed mid-task) and returns
those tasks to pending before processing.
Requires DATABASE_URL.
"""

import argparse
import asyncio
import sys
from datetime import timedelta

import httpx

import app.infrastructure.persistence.database as database
from app.api.v1.dependencies import (
    build_notification_dispatcher,
    build_process_registration_tasks_use_case,
    build_retry_policy,
)
from app.application.use_cases.registration import ResetRegistrationTasksUseCase
from app.application.use_cases.registration.process_registration_tasks import (
    RUN_STATUS_LOCKED,
)
from app.core.config import get_settings
from app.infrastructure.persistence.repositories import (
    CareTeamRepository,
    ProfileRepository,
    RegistrationTaskRepository,
    SubjectLeaseRepository,
)
from app.infrastructure.services import SqlRoomProvisioningService
from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.utils.datetime import utc_now

logger = get_logger("scripts.run_registration_retry_sweep")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--limit", type=int, default=None, help="Max subjects per sweep")
    parser.add_argument(
        "--reset-stuck",
        action="store_true",
        help="Requeue stale in_progress tasks before processing",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    """Find subjects with due (or, with --reset-stuck, stuck) tasks and run the trigger for each."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)

    session_factory = database.AsyncSessionLocal
    task_store = RegistrationTaskRepository(session_factory, build_retry_policy(settings))
    profile_store = ProfileRepository(session_factory)
    limit = args.limit or settings.registration_sweep_batch_size

    async with httpx.AsyncClient(timeout=settings.notification_timeout_seconds) as client:
        process_uc = build_process_registration_tasks_use_case(
            settings,
            task_store,
            profile_store,
            CareTeamRepository(session_factory),
            SubjectLeaseRepository(session_factory),
            SqlRoomProvisioningService(session_factory),
            build_notification_dispatcher(settings, client),
        )
        reset_uc = ResetRegistrationTasksUseCase(
            task_store,
            profile_store,
            process_uc,
            stuck_after_seconds=settings.registration_stuck_after_seconds,
        )

        now = utc_now()
        stuck_before = (
            now - timedelta(seconds=settings.registration_stuck_after_seconds)
            if args.reset_stuck
            else None
        )
        subject_ids = await task_store.list_subjects_with_due_tasks(
            now, limit=limit, stuck_before=stuck_before
        )
        logger.info("Retry sweep: %d subject(s) with due or stuck tasks", len(subject_ids))

        completed = 0
        locked = 0
        for subject_id in subject_ids:
            if args.reset_stuck:
                await reset_uc.execute(subject_id, reset_stuck=True, trigger=False)
            result = await process_uc.execute(subject_id, due_only=True)
            if result.status == RUN_STATUS_LOCKED:
                locked += 1
            if result.registration_completed:
                completed += 1
            logger.info(
                "Subject %s: %s (%d ok, %d failed)",
                subject_id,
                result.status,
                result.successful_tasks,
                result.failed_tasks,
            )

    print(
        f"Done. Subjects swept: {len(subject_ids)}, fully registered: {completed}, "
        f"locked: {locked}"
    )
    await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
