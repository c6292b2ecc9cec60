"""Browser-facing pages.

Anonymous visitors are redirected to the login page instead of getting a 401.
"""

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from setlist.api.deps import CurrentUserOptional, SessionDep
from setlist.config import settings
from setlist.models.band import BandRead
from setlist.models.user import UserRead
from setlist.services.bands import list_bands_for_user

router = APIRouter()


@router.get("/")
async def home(user: CurrentUserOptional, session: SessionDep):
    """Landing page: the signed-in user and their bands."""
    if user is None:
        return RedirectResponse(settings.login_path, status_code=status.HTTP_303_SEE_OTHER)

    bands = await list_bands_for_user(session, user.id)
    return {
        "user": UserRead.model_validate(user).model_dump(),
        "bands": [BandRead.model_validate(band).model_dump(mode="json") for band in bands],
    }
