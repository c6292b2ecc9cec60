"""SQLModel database models."""

from setlist.models.band import Band, BandMember, BandRole
from setlist.models.base import TimestampMixin, UTCDateTime, generate_nanoid, utcnow
from setlist.models.magic_link import MagicLink
from setlist.models.session import UserSession
from setlist.models.user import User

__all__ = [
    "Band",
    "BandMember",
    "BandRole",
    "MagicLink",
    "TimestampMixin",
    "UTCDateTime",
    "User",
    "UserSession",
    "generate_nanoid",
    "utcnow",
]
