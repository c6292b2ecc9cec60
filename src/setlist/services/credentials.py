"""Credential store: users, magic links and sessions.

Every lookup by token hash is an exact match on the full digest. Database
failures surface as :class:`~setlist.exceptions.StorageError`.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import ParamSpec, TypeVar

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, delete, select

from setlist.exceptions import StorageError
from setlist.models import MagicLink, User, UserSession

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def storage_operation(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Translate SQLAlchemy failures into StorageError, logging the cause."""

    @functools.wraps(fn)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await fn(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"Credential store operation {fn.__name__} failed")
            raise StorageError(f"{fn.__name__} failed") from e

    return wrapper


# Users


@storage_operation
async def create_user(session: AsyncSession, email: str) -> User:
    """Create a new active user."""
    user = User(email=email)
    session.add(user)
    await session.flush()
    return user


@storage_operation
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Look up a user by exact (case-sensitive) email."""
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@storage_operation
async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    """Look up a user by id."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


@storage_operation
async def update_last_login(session: AsyncSession, user_id: str, when: datetime) -> None:
    """Record a successful login time."""
    await session.execute(update(User).where(col(User.id) == user_id).values(last_login=when))


# Magic links


@storage_operation
async def create_magic_link(
    session: AsyncSession,
    user_id: str,
    token_hash: str,
    expires_at: datetime,
) -> MagicLink:
    """Persist an unused magic link."""
    link = MagicLink(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    session.add(link)
    await session.flush()
    return link


@storage_operation
async def get_magic_link_by_hash(session: AsyncSession, token_hash: str) -> MagicLink | None:
    """Look up a magic link by the hash of its token."""
    result = await session.execute(select(MagicLink).where(MagicLink.token_hash == token_hash))
    return result.scalar_one_or_none()


@storage_operation
async def mark_magic_link_used(session: AsyncSession, link_id: str, when: datetime) -> bool:
    """Consume a magic link.

    A single conditional write: the row only changes while ``used_at`` is
    still NULL. Returns False when another caller consumed it first.
    """
    stmt = (
        update(MagicLink)
        .where(col(MagicLink.id) == link_id)
        .where(col(MagicLink.used_at).is_(None))
        .values(used_at=when)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1  # type: ignore[attr-defined]


@storage_operation
async def count_expired_magic_links(session: AsyncSession, now: datetime) -> int:
    """Count magic links past expiry."""
    stmt = select(func.count()).select_from(MagicLink).where(col(MagicLink.expires_at) < now)
    result = await session.execute(stmt)
    return result.scalar() or 0


@storage_operation
async def delete_expired_magic_links(session: AsyncSession, now: datetime) -> int:
    """Delete magic links past expiry. Returns the number removed."""
    result = await session.execute(delete(MagicLink).where(col(MagicLink.expires_at) < now))
    return result.rowcount  # type: ignore[attr-defined]


# Sessions


@storage_operation
async def create_session(
    session: AsyncSession,
    user_id: str,
    token_hash: str,
    expires_at: datetime,
) -> UserSession:
    """Persist a session keyed by the hash of its token."""
    user_session = UserSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    session.add(user_session)
    await session.flush()
    return user_session


@storage_operation
async def get_session_by_hash(session: AsyncSession, token_hash: str) -> UserSession | None:
    """Look up a session by the hash of its token."""
    result = await session.execute(select(UserSession).where(UserSession.token_hash == token_hash))
    return result.scalar_one_or_none()


@storage_operation
async def delete_session_by_hash(session: AsyncSession, token_hash: str) -> bool:
    """Delete a session. Deleting a missing session is not an error."""
    result = await session.execute(delete(UserSession).where(col(UserSession.token_hash) == token_hash))
    return result.rowcount > 0  # type: ignore[attr-defined]


@storage_operation
async def list_sessions_for_user(session: AsyncSession, user_id: str) -> list[UserSession]:
    """All sessions for a user, newest first."""
    stmt = (
        select(UserSession)
        .where(UserSession.user_id == user_id)
        .order_by(col(UserSession.created_at).desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars())


@storage_operation
async def delete_sessions_for_user(session: AsyncSession, user_id: str) -> int:
    """Revoke every session belonging to a user."""
    result = await session.execute(delete(UserSession).where(col(UserSession.user_id) == user_id))
    return result.rowcount  # type: ignore[attr-defined]


@storage_operation
async def count_expired_sessions(session: AsyncSession, now: datetime) -> int:
    """Count sessions past expiry."""
    stmt = select(func.count()).select_from(UserSession).where(col(UserSession.expires_at) < now)
    result = await session.execute(stmt)
    return result.scalar() or 0


@storage_operation
async def delete_expired_sessions(session: AsyncSession, now: datetime) -> int:
    """Delete sessions past expiry. Returns the number removed."""
    result = await session.execute(delete(UserSession).where(col(UserSession.expires_at) < now))
    return result.rowcount  # type: ignore[attr-defined]
