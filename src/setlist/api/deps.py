"""FastAPI dependencies for dependency injection.

The session cookie is resolved once per request here and the resulting user
is handed to handlers; nothing downstream reads the raw request for identity.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from setlist.config import settings
from setlist.database import get_session
from setlist.exceptions import AuthenticationError
from setlist.models import User
from setlist.services.magic_links import MagicLinkService
from setlist.services.rate_limit import throttle_client
from setlist.services.sessions import SessionService

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Security scheme: bearer session token carried in a cookie
session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)

SessionToken = Annotated[str | None, Depends(session_cookie)]


def get_magic_link_service(session: SessionDep) -> MagicLinkService:
    """Magic link service bound to the request's database session."""
    return MagicLinkService(session)


def get_session_service(session: SessionDep) -> SessionService:
    """Session service bound to the request's database session."""
    return SessionService(session)


MagicLinkServiceDep = Annotated[MagicLinkService, Depends(get_magic_link_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


async def get_current_user_optional(
    sessions: SessionServiceDep,
    token: SessionToken,
) -> User | None:
    """Get current user if authenticated, None otherwise."""
    if not token:
        return None

    try:
        return await sessions.resolve_session(token)
    except AuthenticationError as e:
        # Expected for stale cookies; the reason stays server-side
        logger.debug(f"Session resolution failed: {e!r}")
        return None


async def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    """Get current authenticated user or raise 401."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentUserOptional = Annotated[User | None, Depends(get_current_user_optional)]


async def enforce_client_throttle(request: Request) -> None:
    """Raise 429 once the client address has used up its login attempts."""
    decision = throttle_client(request)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many login attempts. Please try again in {decision.retry_after} seconds.",
            headers=decision.headers(),
        )


AuthRateLimit = Annotated[None, Depends(enforce_client_throttle)]
