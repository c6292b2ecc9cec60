"""SAQ queue and worker wiring for background tasks."""

from typing import Any

from saq import CronJob, Queue

from setlist.config import settings

queue = Queue.from_url(settings.redis_url)


def get_queue_settings() -> dict[str, Any]:
    """Settings consumed by :func:`setlist.worker.build_worker`."""
    from setlist.tasks.maintenance import cleanup_expired_credentials

    return {
        "queue": queue,
        "functions": [cleanup_expired_credentials],
        "concurrency": 2,
        "cron_jobs": [
            CronJob(cleanup_expired_credentials, cron=settings.cleanup_cron),
        ],
        "shutdown": shutdown,
    }


async def shutdown(_ctx: dict) -> None:
    from setlist.database import close_db

    await close_db()
