"""Login session model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from setlist.models.base import TimestampMixin, UTCDateTime, generate_nanoid


class UserSession(TimestampMixin, SQLModel, table=True):
    """Standing login credential issued after magic link verification.

    The raw session token lives only in the client's cookie.
    """

    __tablename__ = "sessions"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=21)
    token_hash: str = Field(
        unique=True, index=True, max_length=64, description="SHA-256 hex digest of the session token"
    )
    expires_at: datetime = Field(
        sa_type=UTCDateTime,  # type: ignore[call-overload]
        index=True,
        description="Session expiration time",
    )

    def is_expired(self, now: datetime) -> bool:
        """Whether the session is past its fixed expiry at ``now``."""
        return now >= self.expires_at

