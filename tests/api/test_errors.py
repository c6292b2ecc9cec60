"""Exception handler tests."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from setlist.api.errors import (
    authentication_error_handler,
    forbidden_handler,
    malformed_input_handler,
)
from setlist.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    MalformedInputError,
    StorageError,
    TokenAlreadyUsedError,
    TokenExpiredError,
    UserNotFoundError,
)


def make_request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": []})


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [
        InvalidTokenError("no match"),
        TokenExpiredError("expired at noon"),
        TokenAlreadyUsedError("used"),
        UserNotFoundError("gone"),
    ],
)
async def test_authentication_errors_share_one_message(exc):
    response = await authentication_error_handler(make_request(), exc)
    assert response.status_code == 401
    assert json.loads(response.body) == {"detail": "Invalid or expired token"}


@pytest.mark.asyncio
async def test_forbidden_is_distinct():
    response = await forbidden_handler(make_request(), ForbiddenError("Access denied"))
    assert response.status_code == 403
    assert json.loads(response.body) == {"detail": "Access denied"}


@pytest.mark.asyncio
async def test_malformed_input():
    response = await malformed_input_handler(make_request(), MalformedInputError("Email is required"))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_storage_error_is_generic_500(client: AsyncClient):
    with patch(
        "setlist.services.credentials.get_user_by_email",
        new_callable=AsyncMock,
        side_effect=StorageError("get_user_by_email failed"),
    ):
        response = await client.post("/auth/magic-link", json={"email": "test@example.com"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
