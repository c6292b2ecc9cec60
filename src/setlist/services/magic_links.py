"""Magic link issuance and verification."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from setlist.config import settings
from setlist.exceptions import (
    InvalidTokenError,
    MalformedInputError,
    SetlistError,
    TokenAlreadyUsedError,
    TokenExpiredError,
    UserNotFoundError,
)
from setlist.models import User, utcnow
from setlist.services import credentials
from setlist.services.tokens import generate_token, hash_token

logger = logging.getLogger(__name__)


def build_magic_link_url(token: str, base_url: str | None = None) -> str:
    """Verification URL for a raw magic link token."""
    base = (base_url or settings.app_url).rstrip("/")
    return f"{base}/auth/verify?{urlencode({'token': token})}"


class MagicLinkService:
    """Issues single-use login links and exchanges them for users.

    Multiple outstanding links per user stay valid at the same time; issuing
    a new link does not revoke older ones.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        expiration: timedelta | None = None,
    ) -> None:
        self.session = session
        self.clock = clock
        self.expiration = expiration or timedelta(minutes=settings.magic_link_expiration_minutes)

    async def get_or_create_user(self, email: str) -> User:
        """Find the user for an email, signing them up on first contact."""
        user = await credentials.get_user_by_email(self.session, email)
        if user is None:
            user = await credentials.create_user(self.session, email)
            logger.info(f"Created new user {user.id} on first magic link request")
        return user

    async def request_magic_link(self, email: str) -> str:
        """Issue a magic link for ``email`` and return the raw token.

        The caller delivers the token; only its hash is stored.
        """
        if not email or not email.strip():
            raise MalformedInputError("Email is required")

        user = await self.get_or_create_user(email)

        token = generate_token()
        expires_at = self.clock() + self.expiration
        link = await credentials.create_magic_link(self.session, user.id, hash_token(token), expires_at)
        logger.info(f"Issued magic link {link.id} for user {user.id}, expires {expires_at.isoformat()}")

        return token

    async def verify_magic_link(self, token: str) -> User:
        """Consume a magic link and return its user.

        Checks run in a fixed order: existence, already used, expiry. The
        transition to used is a conditional write, so of several concurrent
        verifications of one token at most one succeeds.

        Raises:
            MalformedInputError: empty token
            InvalidTokenError: no link matches
            TokenAlreadyUsedError: link was consumed, possibly by a racing request
            TokenExpiredError: now is at or past the expiry
            UserNotFoundError: link owner is gone
        """
        if not token:
            raise MalformedInputError("Token is required")

        link = await credentials.get_magic_link_by_hash(self.session, hash_token(token))
        if link is None:
            raise InvalidTokenError("No magic link matches token")

        if link.used_at is not None:
            raise TokenAlreadyUsedError(f"Magic link {link.id} already used")

        now = self.clock()
        if link.is_expired(now):
            raise TokenExpiredError(f"Magic link {link.id} expired at {link.expires_at.isoformat()}")

        if not await credentials.mark_magic_link_used(self.session, link.id, now):
            raise TokenAlreadyUsedError(f"Magic link {link.id} consumed by a concurrent request")

        user = await credentials.get_user_by_id(self.session, link.user_id)
        if user is None:
            raise UserNotFoundError(f"User {link.user_id} for magic link {link.id} not found")

        await self._record_login(user, now)
        return user

    async def _record_login(self, user: User, now: datetime) -> None:
        # Telemetry only: a failure here must not undo the login.
        try:
            async with self.session.begin_nested():
                await credentials.update_last_login(self.session, user.id, now)
        except SetlistError as e:
            logger.warning(f"Failed to update last login for user {user.id}: {e!r}")
