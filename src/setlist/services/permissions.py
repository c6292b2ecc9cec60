"""Band membership and role checks gating band and song operations."""

import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from setlist.exceptions import ForbiddenError, MalformedInputError, NotFoundError, UnauthenticatedError
from setlist.models import BandMember, BandRole, User
from setlist.services import bands

logger = logging.getLogger(__name__)

ROLE_RANK: dict[BandRole, int] = {
    BandRole.OWNER: 3,
    BandRole.ADMIN: 2,
    BandRole.MEMBER: 1,
}

# Roles a member may be invited with; ownership is only granted at band creation
INVITABLE_ROLES = frozenset({BandRole.ADMIN, BandRole.MEMBER})


class BandAction(str, Enum):
    """Operations scoped to a band."""

    VIEW = "view"
    EDIT_SONGS = "edit_songs"
    EDIT_SECTIONS = "edit_sections"
    REORDER = "reorder"
    INVITE_MEMBER = "invite_member"
    REMOVE_MEMBER = "remove_member"


# Minimum role for each action
REQUIRED_ROLE: dict[BandAction, BandRole] = {
    BandAction.VIEW: BandRole.MEMBER,
    BandAction.EDIT_SONGS: BandRole.MEMBER,
    BandAction.EDIT_SECTIONS: BandRole.MEMBER,
    BandAction.REORDER: BandRole.MEMBER,
    BandAction.INVITE_MEMBER: BandRole.ADMIN,
    BandAction.REMOVE_MEMBER: BandRole.ADMIN,
}


def role_at_least(role: BandRole | str, minimum: BandRole) -> bool:
    """Whether ``role`` ranks at or above ``minimum``."""
    try:
        return ROLE_RANK[BandRole(role)] >= ROLE_RANK[minimum]
    except ValueError:
        # Unknown role strings grant nothing
        return False


def has_permission(member: BandMember, action: BandAction) -> bool:
    """Whether a membership allows ``action``."""
    return member.is_active and role_at_least(member.role, REQUIRED_ROLE[action])


async def require_member(session: AsyncSession, band_id: str, user_id: str) -> BandMember:
    """Return the active membership for (band, user) or raise ForbiddenError."""
    member = await bands.get_member(session, band_id, user_id)
    if member is None:
        logger.info(f"User {user_id} denied access to band {band_id}: not a member")
        raise ForbiddenError("Access denied")
    return member


async def authorize(
    session: AsyncSession,
    band_id: str,
    user: User | None,
    action: BandAction,
) -> BandMember:
    """Check that ``user`` may perform ``action`` on a band.

    Authentication is checked before any membership lookup.

    Raises:
        UnauthenticatedError: no resolved user
        ForbiddenError: not a member, or role too low
    """
    if user is None:
        raise UnauthenticatedError("Not authenticated")

    member = await require_member(session, band_id, user.id)
    if not has_permission(member, action):
        logger.info(f"User {user.id} with role {member.role} denied {action.value} on band {band_id}")
        raise ForbiddenError(f"Role '{member.role}' may not {action.value.replace('_', ' ')}")
    return member


def parse_invite_role(role: str | None) -> BandRole:
    """Validate the role requested for an invitation, defaulting to member."""
    if not role:
        return BandRole.MEMBER
    try:
        parsed = BandRole(role)
    except ValueError:
        raise MalformedInputError(f"Invalid role: {role}") from None
    if parsed not in INVITABLE_ROLES:
        raise MalformedInputError(f"Invalid role: {role}")
    return parsed


async def authorize_invite(
    session: AsyncSession,
    band_id: str,
    actor: User | None,
    role: str | None,
) -> BandRole:
    """Check that ``actor`` may invite into a band, returning the role to grant."""
    await authorize(session, band_id, actor, BandAction.INVITE_MEMBER)
    return parse_invite_role(role)


async def authorize_member_removal(
    session: AsyncSession,
    band_id: str,
    actor: User | None,
    target_user_id: str,
) -> BandMember:
    """Check that ``actor`` may remove ``target_user_id`` from a band.

    Self-removal and removing the owner are rejected whatever the actor's
    role. Returns the target's membership.

    Raises:
        UnauthenticatedError: no resolved user
        ForbiddenError: actor lacks the role, targets themselves, or targets the owner
        NotFoundError: target is not a member
    """
    member = await authorize(session, band_id, actor, BandAction.REMOVE_MEMBER)

    if member.user_id == target_user_id:
        raise ForbiddenError("You cannot remove yourself from the band")

    target = await bands.get_member(session, band_id, target_user_id)
    if target is None:
        raise NotFoundError("User is not a member of this band")

    if target.role == BandRole.OWNER:
        raise ForbiddenError("The owner cannot be removed from the band")

    return target
