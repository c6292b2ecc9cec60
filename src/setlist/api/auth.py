"""Authentication endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, EmailStr
from sqlalchemy.exc import SQLAlchemyError

from setlist.api.deps import (
    AuthRateLimit,
    CurrentUser,
    MagicLinkServiceDep,
    SessionDep,
    SessionServiceDep,
    SessionToken,
)
from setlist.config import settings
from setlist.exceptions import AuthenticationError
from setlist.models.user import UserRead
from setlist.services.bands import ensure_default_band
from setlist.services.email import email_service
from setlist.services.magic_links import build_magic_link_url
from setlist.services.rate_limit import throttle_email

logger = logging.getLogger(__name__)

router = APIRouter()


class MagicLinkRequest(BaseModel):
    """Request body for a magic link."""

    email: EmailStr


class MagicLinkResponse(BaseModel):
    """Response for a magic link request."""

    success: bool
    message: str
    # In development, include the magic link for testing
    magic_link: str | None = None


class LoginPage(BaseModel):
    """Placeholder payload for the login page."""

    message: str
    error: str | None = None


def set_session_cookie(response: Response, token: str, *, secure: bool) -> None:
    """Attach the session cookie to a response."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        secure=secure,
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie(response: Response, *, secure: bool) -> None:
    """Expire the session cookie on the client."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=secure,
        httponly=True,
        samesite="strict",
    )


def is_secure_request(request: Request) -> bool:
    return request.url.scheme == "https"


@router.get("/login", response_model=LoginPage)
async def login_page(error: str | None = None):
    """Login page. Rendering is left to the frontend."""
    return LoginPage(message="Enter your email to receive a sign-in link", error=error)


@router.post("/magic-link", response_model=MagicLinkResponse, response_model_exclude_none=True)
async def request_magic_link(
    body: MagicLinkRequest,
    session: SessionDep,
    magic_links: MagicLinkServiceDep,
    _rate_limit: AuthRateLimit,
):
    """
    Request a magic link for authentication.

    Unknown emails are signed up on the spot.
    """
    throttle = throttle_email(body.email)
    if not throttle.allowed:
        logger.warning("Magic link throttle hit for an email address")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many sign-in links requested for this email. Please try again later.",
            headers=throttle.headers(),
        )

    token = await magic_links.request_magic_link(body.email)
    await session.commit()

    magic_link = build_magic_link_url(token)

    email_sent = await email_service.send_magic_link(to=body.email, magic_link=magic_link)
    if not email_sent:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send magic link email",
        )

    response = MagicLinkResponse(success=True, message="Magic link sent to your email")

    # Include magic link in development for testing
    if settings.is_development:
        response.magic_link = magic_link

    return response


@router.get("/verify")
async def verify(
    request: Request,
    session: SessionDep,
    magic_links: MagicLinkServiceDep,
    sessions: SessionServiceDep,
    _rate_limit: AuthRateLimit,
    token: str | None = None,
):
    """
    Exchange a magic link token for a session cookie.

    Every verification failure lands on the same login error so token state
    can't be probed from outside.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token is required",
        )

    try:
        user = await magic_links.verify_magic_link(token)
    except AuthenticationError as e:
        logger.info(f"Magic link verification failed: {e!r}")
        await session.rollback()
        return RedirectResponse(
            f"{settings.login_path}?error=invalid_token",
            status_code=status.HTTP_303_SEE_OTHER,
        )

    session_token = await sessions.create_session(user.id)
    await session.commit()
    logger.info(f"User {user.id} signed in")

    # A missing default band must not block sign-in
    try:
        await ensure_default_band(session, user)
        await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to create default band for user {user.id}: {e!r}")
        await session.rollback()

    response = RedirectResponse(settings.login_redirect_path, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, session_token, secure=is_secure_request(request))
    return response


@router.post("/logout")
async def logout(
    request: Request,
    session: SessionDep,
    sessions: SessionServiceDep,
    token: SessionToken,
):
    """End the current session and clear its cookie."""
    await sessions.invalidate_session(token)
    await session.commit()

    response = JSONResponse({"message": "Logged out successfully"})
    clear_session_cookie(response, secure=is_secure_request(request))
    return response


@router.get("/me", response_model=UserRead)
async def get_current_user_info(user: CurrentUser):
    """Get current authenticated user info."""
    return UserRead.model_validate(user)
