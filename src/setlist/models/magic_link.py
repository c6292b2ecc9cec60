"""Magic link model for passwordless auth."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from setlist.models.base import TimestampMixin, UTCDateTime, generate_nanoid


class MagicLink(TimestampMixin, SQLModel, table=True):
    """One-time proof of email ownership.

    Only the SHA-256 of the raw token is stored. ``used_at`` is NULL until the
    link is consumed, and moves from NULL to a timestamp exactly once.
    """

    __tablename__ = "magic_links"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=21)
    token_hash: str = Field(
        unique=True, index=True, max_length=64, description="SHA-256 hex digest of the token"
    )
    expires_at: datetime = Field(
        sa_type=UTCDateTime,  # type: ignore[call-overload]
        index=True,
        description="Link expiration time",
    )
    used_at: datetime | None = Field(
        default=None,
        sa_type=UTCDateTime,  # type: ignore[call-overload]
        description="When the link was consumed",
    )

    def is_expired(self, now: datetime) -> bool:
        """Whether the link is past its validity window at ``now``.

        The expiry instant itself counts as expired.
        """
        return now >= self.expires_at
