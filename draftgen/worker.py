"""Celery worker entry point.

Background worker for periodic maintenance. Uses an event loop to run
async tasks within Celery workers.

Run the worker with the beat scheduler embedded:
    celery -A draftgen.worker worker -B --loglevel=info
"""

import asyncio
import logging
from datetime import datetime, timezone

from celery import Celery, shared_task
from celery.schedules import crontab
from celery.signals import worker_ready
from sqlalchemy import text

from draftgen.core.config import Settings, get_settings
from draftgen.db.session import close_db, get_session_maker
from draftgen.interfaces.quota_store import start_of_month
from draftgen.strategies.stores import SQLQuotaStore, SQLUnitOfWork

logger = logging.getLogger(__name__)

# Initialize Celery app
settings: Settings = get_settings()

celery_app = Celery(
    "draftgen_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["draftgen.worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=600,
    task_soft_time_limit=540,
    worker_prefetch_multiplier=1,
    beat_schedule={
        # Counters also reset lazily on read; this keeps stored rows tidy
        "reset-monthly-quotas": {
            "task": "draftgen.worker.reset_monthly_quotas",
            "schedule": crontab(minute=5, hour=0, day_of_month=1),
        },
    },
)


@worker_ready.connect
def on_worker_ready(**kwargs):
    """Log when worker is ready."""
    logger.info("Celery worker is ready and listening for tasks")


def run_async(coro):
    """Run an async coroutine in a new event loop.

    Celery workers don't have a running event loop, so we need
    to create one for async operations.

    Args:
        coro: The async coroutine to run.

    Returns:
        The result of the coroutine.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@shared_task(name="draftgen.worker.reset_monthly_quotas")
def reset_monthly_quotas_task() -> dict:
    """Zero every monthly draft counter left over from a previous month.

    Returns:
        Dict with the number of users reset.
    """
    try:
        logger.info("Starting monthly quota reset")
        return run_async(reset_monthly_quotas(datetime.now(timezone.utc)))
    except Exception as e:
        logger.exception(f"Monthly quota reset failed: {e}")
        return {
            "status": "failed",
            "error": str(e),
        }


async def reset_monthly_quotas(now: datetime, app_settings: Settings | None = None) -> dict:
    """Reset counters whose period started before ``now``'s month.

    Args:
        now: Reference time.
        app_settings: Optional settings. If None, uses global settings.

    Returns:
        Dict with the number of users reset and the new period start.
    """
    period_start = start_of_month(now)
    session_maker = get_session_maker(app_settings)
    try:
        async with session_maker() as session:
            reset_count = await SQLQuotaStore(session).reset_expired(period_start)
            await SQLUnitOfWork(session).commit()
    finally:
        # The engine is bound to this task's event loop
        await close_db()

    logger.info(f"Reset monthly drafts for {reset_count} user(s), period {period_start.date()}")
    return {
        "status": "completed",
        "reset_count": reset_count,
        "period_start": period_start.isoformat(),
    }


@shared_task(name="draftgen.worker.health_check")
def health_check_task() -> dict:
    """Health check task for monitoring worker status.

    Returns:
        Dict with worker health status.
    """
    try:
        logger.debug("Running health check")
        return run_async(_health_check_async())
    except Exception as e:
        logger.exception(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }


async def _health_check_async() -> dict:
    """Async health check implementation.

    Returns:
        Dict with worker health status.
    """
    try:
        async with get_session_maker()() as session:
            await session.execute(text("SELECT 1"))
        logger.debug("Database health check passed")
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        }
    finally:
        await close_db()

    return {
        "status": "healthy",
        "database": "connected",
    }
