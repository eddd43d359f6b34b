"""Unit tests for authentication dependencies."""

import pytest
import structlog
from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials

from api.dependencies.auth import get_auth_provider, get_current_user
from core.exceptions import AuthenticationError, ErrorCode
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser


def _request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": []})


@pytest.fixture
def mock_auth_provider() -> JWTAuthProvider:
    return JWTAuthProvider(
        secret_key="test-secret", algorithm="HS256", expire_minutes=30, audience=""
    )


@pytest.fixture
def test_token_user() -> TokenUser:
    return TokenUser(id="auth0|test-user", email="test@example.com", display_name="Test User")


@pytest.fixture(autouse=True)
def _clean_log_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# --- get_current_user ---


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_user_with_valid_token(
        self, mock_auth_provider: JWTAuthProvider, test_token_user: TokenUser
    ):
        token = mock_auth_provider.create_token(test_token_user)
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        result = await get_current_user(_request(), credentials, mock_auth_provider)

        assert result.email == test_token_user.email
        assert result.id == test_token_user.id

    @pytest.mark.asyncio
    async def test_binds_caller_for_logs_and_rate_limits(
        self, mock_auth_provider: JWTAuthProvider, test_token_user: TokenUser
    ):
        token = mock_auth_provider.create_token(test_token_user)
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
        request = _request()

        await get_current_user(request, credentials, mock_auth_provider)

        assert request.state.user_id == "auth0|test-user"
        assert structlog.contextvars.get_contextvars()["actor_id"] == "auth0|test-user"

    @pytest.mark.asyncio
    async def test_raises_when_no_credentials(self, mock_auth_provider: JWTAuthProvider):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(_request(), None, mock_auth_provider)

        assert exc_info.value.error_code == ErrorCode.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_raises_when_invalid_token(self, mock_auth_provider: JWTAuthProvider):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="invalid.jwt.token")

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(_request(), credentials, mock_auth_provider)

        assert exc_info.value.error_code == ErrorCode.INVALID_TOKEN
        assert "actor_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_raises_when_expired_token(self, test_token_user: TokenUser):
        # Negative expiry produces an already-expired token
        provider = JWTAuthProvider(
            secret_key="test-secret", algorithm="HS256", expire_minutes=-1, audience=""
        )
        token = provider.create_token(test_token_user)
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        normal_provider = JWTAuthProvider(
            secret_key="test-secret", algorithm="HS256", expire_minutes=30, audience=""
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(_request(), credentials, normal_provider)

        assert exc_info.value.error_code == ErrorCode.INVALID_TOKEN


# --- get_auth_provider ---


class TestGetAuthProvider:
    def test_returns_shared_instance(self):
        assert get_auth_provider() is get_auth_provider()
