"""Celery worker configuration and periodic tasks.

Run with:
    celery -A arena.worker worker --beat
"""

import asyncio
import logging

from celery import Celery

from arena.core.config import settings
from arena.core.database import async_session_factory
from arena.services.waitlist import expire_stale_entries

logger = logging.getLogger(__name__)

celery_app = Celery(
    "arena",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone=settings.facility_timezone,
    enable_utc=True,
    beat_schedule={
        "expire-stale-waitlist-entries": {
            "task": "arena.worker.expire_waitlist",
            "schedule": settings.waitlist_sweep_minutes * 60,
        },
    },
)


async def _expire_waitlist() -> int:
    async with async_session_factory() as session:
        count = await expire_stale_entries(session)
        await session.commit()
    return count


@celery_app.task(name="arena.worker.expire_waitlist")
def expire_waitlist() -> int:
    """Expire waiting entries whose slot has already started."""
    count = asyncio.run(_expire_waitlist())
    if count:
        logger.info("Expired %s stale waitlist entries", count)
    return count
