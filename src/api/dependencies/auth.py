"""Authentication dependencies for FastAPI.

The identity provider is trusted as-is: once a bearer token validates, its
subject is the acting user for every group and task operation in the request.
"""

from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, ErrorCode
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

bearer_scheme = HTTPBearer(auto_error=False, description="Identity provider access token")


@lru_cache
def get_auth_provider() -> JWTAuthProvider:
    """Process-wide provider, so its JWKS cache is shared across requests."""
    return JWTAuthProvider()


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> TokenUser:
    """
    Resolve the acting user from the bearer token.

    The user id is bound into the structlog context and stored on
    ``request.state`` for per-user rate limiting.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if credentials is None:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    user = await auth_provider.validate_token(credentials.credentials)
    if user is None:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(actor_id=user.id)
    return user


CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
