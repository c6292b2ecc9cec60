"""Maintenance background tasks for cleanup operations."""

import logging
from typing import Any

from setlist.database import get_session_context
from setlist.exceptions import StorageError
from setlist.models import utcnow
from setlist.services import credentials

logger = logging.getLogger(__name__)

# Timeout for maintenance tasks (10 minutes)
MAINTENANCE_TIMEOUT_SECONDS = 10 * 60


async def cleanup_expired_credentials(
    ctx: dict[str, Any],
    dry_run: bool = False,
) -> dict[str, Any]:
    """Delete magic links and sessions that are past their expiry.

    Only rows that can no longer authenticate are touched, so the sweep can
    run while verifications are in flight.

    Args:
        ctx: SAQ context
        dry_run: If True, only report what would be deleted

    Returns:
        Dict with cleanup results
    """
    now = utcnow()

    async with get_session_context() as session:
        try:
            if dry_run:
                magic_links = await credentials.count_expired_magic_links(session, now)
                sessions = await credentials.count_expired_sessions(session, now)
            else:
                magic_links = await credentials.delete_expired_magic_links(session, now)
                sessions = await credentials.delete_expired_sessions(session, now)
                await session.commit()
        except StorageError as e:
            error = f"Credential cleanup failed: {e}"
            logger.exception(error)
            await session.rollback()
            return {"success": False, "error": error}

    logger.info(
        f"Credential cleanup complete: {magic_links} magic links and {sessions} sessions "
        f"{'would be ' if dry_run else ''}deleted"
    )

    return {
        "success": True,
        "dry_run": dry_run,
        "cutoff": now.isoformat(),
        "magic_links_deleted": 0 if dry_run else magic_links,
        "sessions_deleted": 0 if dry_run else sessions,
        "magic_links_expired": magic_links,
        "sessions_expired": sessions,
    }


# Set SAQ job timeouts
cleanup_expired_credentials.timeout = MAINTENANCE_TIMEOUT_SECONDS  # type: ignore[attr-defined]
