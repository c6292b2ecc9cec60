"""Background task processing."""

from setlist.tasks.maintenance import cleanup_expired_credentials
from setlist.tasks.queue import get_queue_settings, queue

__all__ = ["cleanup_expired_credentials", "get_queue_settings", "queue"]
