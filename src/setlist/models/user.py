"""User model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from setlist.models.base import TimestampMixin, UTCDateTime, generate_nanoid


class User(TimestampMixin, SQLModel, table=True):
    """User account model.

    Created on the first magic link request for an unseen email. Only
    ``last_login`` changes afterwards.
    """

    __tablename__ = "users"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    email: str = Field(unique=True, index=True, max_length=255)
    last_login: datetime | None = Field(
        default=None,
        sa_type=UTCDateTime,  # type: ignore[call-overload]
        description="Timestamp of the most recent successful magic link verification",
    )
    is_active: bool = Field(default=True)


class UserRead(SQLModel):
    """Schema for reading a user."""

    id: str
    email: str
