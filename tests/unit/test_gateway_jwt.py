"""Unit tests for JWT handler and auth dependencies."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from config.settings import settings
from src.pm_common.enums import UserRole
from src.pm_common.errors import UnauthorizedError
from src.pm_gateway.auth.dependencies import get_current_user, require_admin
from src.pm_gateway.auth.jwt_handler import create_access_token, decode_token
from src.pm_gateway.user.db_models import UserModel


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("user-123")
    # Decode without verification to inspect claims
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["type"] == "access"
    assert payload["role"] == "user"


def test_admin_token_carries_role() -> None:
    payload = jwt.get_unverified_claims(create_access_token("ops", role=UserRole.ADMIN))
    assert payload["role"] == "admin"


def test_decode_valid_access_token() -> None:
    payload = decode_token(create_access_token("user-abc"))
    assert payload["sub"] == "user-abc"


def test_expired_access_token_raises_unauthorized() -> None:
    """Expired access token must raise UnauthorizedError."""
    # Monkey-patch expiry to past
    with patch(
        "src.pm_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token("user-abc")
    with pytest.raises(UnauthorizedError):
        decode_token(token)


def test_tampered_token_raises_error() -> None:
    """Tampered token signature must be rejected."""
    token = create_access_token("user-abc")
    tampered = token[:-4] + "xxxx"
    with pytest.raises(UnauthorizedError):
        decode_token(tampered)


def test_token_without_access_type_rejected() -> None:
    token = jwt.encode(
        {"sub": "user-abc", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256"
    )
    with pytest.raises(UnauthorizedError):
        decode_token(token)


class TestRequireAdmin:
    async def test_missing_credentials(self) -> None:
        with pytest.raises(UnauthorizedError):
            await require_admin(None)

    async def test_user_token_is_not_admin(self) -> None:
        with pytest.raises(UnauthorizedError):
            await require_admin(_bearer(create_access_token("u1")))

    async def test_admin_token(self) -> None:
        payload = await require_admin(_bearer(create_access_token("ops", role=UserRole.ADMIN)))
        assert payload["sub"] == "ops"


class TestGetCurrentUser:
    async def test_returns_user(self) -> None:
        user = UserModel(id="00000000000000a1", email="a@example.com", is_active=True)
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        found = await get_current_user(_bearer(create_access_token(user.id)), db)
        assert found is user

    async def test_unknown_user(self) -> None:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        with pytest.raises(UnauthorizedError):
            await get_current_user(_bearer(create_access_token("ghost")), db)

    async def test_disabled_user(self) -> None:
        user = UserModel(id="00000000000000a1", email="a@example.com", is_active=False)
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        with pytest.raises(UnauthorizedError):
            await get_current_user(_bearer(create_access_token(user.id)), db)

    async def test_missing_header(self) -> None:
        with pytest.raises(UnauthorizedError):
            await get_current_user(None, AsyncMock())
