"""Band and membership endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, EmailStr

from setlist.api.deps import CurrentUser, CurrentUserOptional, SessionDep
from setlist.exceptions import NotFoundError
from setlist.models import BandRole
from setlist.models.band import BandCreate, BandDetail, BandMemberRead, BandRead
from setlist.services import bands, credentials
from setlist.services.permissions import (
    BandAction,
    authorize,
    authorize_invite,
    authorize_member_removal,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class InviteMemberRequest(BaseModel):
    """Request body for inviting an existing user."""

    email: EmailStr
    role: str | None = None


@router.get("", response_model=list[BandRead])
async def list_bands(user: CurrentUser, session: SessionDep):
    """List bands the current user belongs to."""
    result = await bands.list_bands_for_user(session, user.id)
    return [BandRead.model_validate(band) for band in result]


@router.post("", response_model=BandRead, status_code=status.HTTP_201_CREATED)
async def create_band(band_in: BandCreate, user: CurrentUser, session: SessionDep):
    """Create a band owned by the current user."""
    name = band_in.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Band name is required",
        )

    band = await bands.create_band(session, name, band_in.description, user.id)
    await session.commit()
    logger.info(f"User {user.id} created band {band.id}")
    return BandRead.model_validate(band)


@router.get("/{band_id}", response_model=BandDetail)
async def get_band(band_id: str, user: CurrentUserOptional, session: SessionDep):
    """Get a band with its members."""
    member = await authorize(session, band_id, user, BandAction.VIEW)

    band = await bands.get_band(session, band_id)
    if band is None:
        raise NotFoundError("Band not found")

    members = await bands.list_members(session, band_id)
    return BandDetail(
        **BandRead.model_validate(band).model_dump(),
        role=BandRole(member.role),
        members=[
            BandMemberRead(
                user_id=m.user_id,
                email=u.email,
                role=BandRole(m.role),
                joined_at=m.joined_at,
            )
            for m, u in members
        ],
    )


@router.post(
    "/{band_id}/members",
    response_model=BandMemberRead,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    band_id: str,
    body: InviteMemberRequest,
    user: CurrentUserOptional,
    session: SessionDep,
):
    """Add an existing user to a band."""
    role = await authorize_invite(session, band_id, user, body.role)

    invited = await credentials.get_user_by_email(session, body.email)
    if invited is None:
        raise NotFoundError("User with this email does not exist. They must sign in first.")

    if await bands.get_member(session, band_id, invited.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this band",
        )

    member = await bands.add_member(session, band_id, invited.id, role)
    await session.commit()
    logger.info(f"Added user {invited.id} to band {band_id} as {role.value}")

    return BandMemberRead(
        user_id=invited.id,
        email=invited.email,
        role=role,
        joined_at=member.joined_at,
    )


@router.delete("/{band_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    band_id: str,
    user_id: str,
    user: CurrentUserOptional,
    session: SessionDep,
):
    """Remove a member from a band."""
    await authorize_member_removal(session, band_id, user, user_id)

    await bands.remove_member(session, band_id, user_id)
    await session.commit()
    logger.info(f"Removed user {user_id} from band {band_id}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
