"""Band and band membership models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from setlist.models.base import TimestampMixin, UTCDateTime, generate_nanoid, utcnow


class BandRole(str, Enum):
    """A member's privilege tier within a band, highest first."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Band(TimestampMixin, SQLModel, table=True):
    """Band (tenant) owning songs."""

    __tablename__ = "bands"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None)
    created_by: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=21)
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=UTCDateTime,  # type: ignore[call-overload]
        sa_column_kwargs={"onupdate": utcnow},
    )
    is_active: bool = Field(default=True, index=True)


class BandMember(SQLModel, table=True):
    """Membership of a user in a band, carrying their role."""

    __tablename__ = "band_members"
    __table_args__ = (UniqueConstraint("band_id", "user_id", name="uq_band_members_band_user"),)

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    band_id: str = Field(foreign_key="bands.id", ondelete="CASCADE", index=True, max_length=21)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=21)
    role: str = Field(
        default=BandRole.MEMBER.value,
        sa_column=Column(String(20), nullable=False, default=BandRole.MEMBER.value),
    )
    joined_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=UTCDateTime,  # type: ignore[call-overload]
    )
    is_active: bool = Field(default=True)


class BandCreate(SQLModel):
    """Schema for creating a band."""

    name: str
    description: str | None = None


class BandRead(SQLModel):
    """Schema for reading a band."""

    id: str
    name: str
    description: str | None
    created_by: str
    created_at: datetime


class BandMemberRead(SQLModel):
    """Schema for reading a band member."""

    user_id: str
    email: str
    role: BandRole
    joined_at: datetime


class BandDetail(BandRead):
    """Band with its members and the caller's role."""

    members: list[BandMemberRead]
    role: BandRole
