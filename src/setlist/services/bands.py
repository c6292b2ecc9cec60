"""Band membership provider.

Owns the ``bands`` and ``band_members`` tables that the permission checks
read.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, delete, select

from setlist.models import Band, BandMember, BandRole, User

logger = logging.getLogger(__name__)

DEFAULT_BAND_NAME = "My Band"
DEFAULT_BAND_DESCRIPTION = "Your personal band for managing songs and setlists"


async def create_band(
    session: AsyncSession,
    name: str,
    description: str | None,
    owner_id: str,
) -> Band:
    """Create a band with its creator as the sole owner."""
    band = Band(name=name, description=description, created_by=owner_id)
    session.add(band)
    await session.flush()
    await add_member(session, band.id, owner_id, BandRole.OWNER)
    return band


async def get_band(session: AsyncSession, band_id: str) -> Band | None:
    """Look up an active band."""
    stmt = select(Band).where(Band.id == band_id).where(col(Band.is_active).is_(True))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_bands_for_user(session: AsyncSession, user_id: str) -> list[Band]:
    """Active bands the user actively belongs to, most recently updated first."""
    stmt = (
        select(Band)
        .join(BandMember, col(BandMember.band_id) == col(Band.id))
        .where(BandMember.user_id == user_id)
        .where(col(BandMember.is_active).is_(True))
        .where(col(Band.is_active).is_(True))
        .order_by(col(Band.updated_at).desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars())


async def list_members(session: AsyncSession, band_id: str) -> list[tuple[BandMember, User]]:
    """Active members of a band with their users, in join order."""
    stmt = (
        select(BandMember, User)
        .join(User, col(User.id) == col(BandMember.user_id))
        .where(BandMember.band_id == band_id)
        .where(col(BandMember.is_active).is_(True))
        .order_by(col(BandMember.joined_at))
    )
    result = await session.execute(stmt)
    return [(member, user) for member, user in result.all()]


async def get_member(session: AsyncSession, band_id: str, user_id: str) -> BandMember | None:
    """Active membership row for a (band, user) pair."""
    stmt = (
        select(BandMember)
        .where(BandMember.band_id == band_id)
        .where(BandMember.user_id == user_id)
        .where(col(BandMember.is_active).is_(True))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def add_member(
    session: AsyncSession,
    band_id: str,
    user_id: str,
    role: BandRole = BandRole.MEMBER,
) -> BandMember:
    """Add a user to a band."""
    member = BandMember(band_id=band_id, user_id=user_id, role=role.value)
    session.add(member)
    await session.flush()
    return member


async def remove_member(session: AsyncSession, band_id: str, user_id: str) -> None:
    """Remove a user from a band."""
    stmt = (
        delete(BandMember)
        .where(col(BandMember.band_id) == band_id)
        .where(col(BandMember.user_id) == user_id)
    )
    await session.execute(stmt)


async def ensure_default_band(session: AsyncSession, user: User) -> Band | None:
    """Give a user with no bands a personal one. Returns it if created."""
    if await list_bands_for_user(session, user.id):
        return None
    band = await create_band(session, DEFAULT_BAND_NAME, DEFAULT_BAND_DESCRIPTION, user.id)
    logger.info(f"Created default band {band.id} for user {user.id}")
    return band
