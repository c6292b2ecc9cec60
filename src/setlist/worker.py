"""Worker process: runs queued jobs and the expired-credential cleanup cron."""

import asyncio
import logging

from saq import Worker

from setlist.tasks.queue import get_queue_settings

logger = logging.getLogger(__name__)


def build_worker(concurrency: int | None = None) -> Worker:
    queue_settings = get_queue_settings()
    return Worker(
        queue=queue_settings["queue"],
        functions=queue_settings["functions"],
        concurrency=concurrency or queue_settings["concurrency"],
        cron_jobs=queue_settings["cron_jobs"],
        shutdown=queue_settings["shutdown"],
    )


def run(concurrency: int | None = None, log_level: str | None = None) -> None:
    from setlist.logging import setup_logging

    setup_logging(log_level)
    worker = build_worker(concurrency)
    logger.info(f"Starting worker with concurrency={worker.concurrency}")
    asyncio.run(worker.start())


def main() -> None:
    run()


if __name__ == "__main__":
    main()
