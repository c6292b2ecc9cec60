"""Session token issuance and resolution."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from setlist.config import settings
from setlist.exceptions import InvalidTokenError, TokenExpiredError, UserNotFoundError
from setlist.models import User, utcnow
from setlist.services import credentials
from setlist.services.tokens import generate_token, hash_token

logger = logging.getLogger(__name__)


class SessionService:
    """Mints, resolves and revokes login sessions.

    Expiry is fixed at creation; resolving a session never extends it.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        lifetime: timedelta | None = None,
    ) -> None:
        self.session = session
        self.clock = clock
        self.lifetime = lifetime or timedelta(days=settings.session_expiration_days)

    async def create_session(self, user_id: str) -> str:
        """Start a session for ``user_id`` and return the raw token."""
        token = generate_token()
        expires_at = self.clock() + self.lifetime
        user_session = await credentials.create_session(self.session, user_id, hash_token(token), expires_at)
        logger.info(f"Created session {user_session.id} for user {user_id}")
        return token

    async def resolve_session(self, token: str | None) -> User:
        """Return the user behind a session token.

        Raises:
            InvalidTokenError: missing token or no matching session
            TokenExpiredError: session is at or past its expiry
            UserNotFoundError: session owner is gone
        """
        if not token:
            raise InvalidTokenError("No session token")

        user_session = await credentials.get_session_by_hash(self.session, hash_token(token))
        if user_session is None:
            raise InvalidTokenError("No session matches token")

        if user_session.is_expired(self.clock()):
            raise TokenExpiredError(f"Session {user_session.id} expired")

        user = await credentials.get_user_by_id(self.session, user_session.user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_session.user_id} for session {user_session.id} not found")

        return user

    async def invalidate_session(self, token: str | None) -> None:
        """Log out a session. Unknown or empty tokens are a no-op."""
        if not token:
            return
        if await credentials.delete_session_by_hash(self.session, hash_token(token)):
            logger.info("Session invalidated")
