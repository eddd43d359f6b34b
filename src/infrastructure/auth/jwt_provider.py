"""JWT authentication provider implementation.

Supports both identity-provider access tokens (RS256, verified against the
issuer's JWKS) and locally-created tokens (HS256, for development and tests).

Access token payload structure:
    {
        "sub": "auth0|64f1c2...",
        "iss": "https://efficio.eu.auth0.com/",
        "aud": "https://api.efficio.app",
        "email": "user@example.com",
        "name": "Jane Doe",
        "picture": "https://...",
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
from jose import JWTError, jwt

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = logging.getLogger(__name__)

# Module-level JWKS cache (fetched once, reused across requests)
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys(jwks_url: str) -> dict[str, Any]:
    """Fetch and cache the issuer's signing keys, keyed by ``kid``."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
            _jwks_cache = {
                key_data["kid"]: key_data
                for key_data in jwks_data.get("keys", [])
                if key_data.get("kid")
            }
            logger.info("Fetched %d JWKS keys from %s", len(_jwks_cache), jwks_url)
            return _jwks_cache
    except (httpx.HTTPError, ValueError):
        logger.exception("Failed to fetch JWKS from %s", jwks_url)
        return {}


def clear_jwks_cache() -> None:
    """Forget cached signing keys so the next RS256 token refetches them."""
    global _jwks_cache
    _jwks_cache = None


class JWTAuthProvider:
    """JWT-based authentication provider.

    Handles validation of both provider-issued (RS256) and
    locally-created (HS256) JWTs.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        issuer: str = settings.auth_issuer_url,
        audience: str = settings.auth_audience,
        jwks_url: str = settings.jwks_url,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._issuer = issuer
        self._audience = audience
        self._jwks_url = jwks_url

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT token and extract user info.

        Detects the signing algorithm from the token header:
        - RS256 (identity provider): validates via JWKS public key
        - HS256 (local/test): validates via shared secret

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "RS256":
                payload = await self._validate_rs256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )

            if payload is None:
                return None

            user_id = payload.get("sub")
            if not user_id:
                return None

            return TokenUser(
                id=str(user_id),
                email=payload.get("email"),
                display_name=payload.get("name") or payload.get("nickname"),
                picture=payload.get("picture"),
            )

        except JWTError:
            return None

    async def _validate_rs256(self, token: str, header: dict) -> Optional[dict]:
        """Validate an RS256-signed JWT using the issuer's JWKS."""
        kid = header.get("kid")
        if not kid:
            return None

        jwks_keys = await _get_jwks_keys(self._jwks_url)
        key_data = jwks_keys.get(kid)
        if not key_data:
            # Unknown kid: the issuer may have rotated keys
            clear_jwks_cache()
            jwks_keys = await _get_jwks_keys(self._jwks_url)
            key_data = jwks_keys.get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        return jwt.decode(
            token,
            key_data,
            algorithms=["RS256"],
            audience=self._audience or None,
            issuer=self._issuer or None,
            options={"verify_aud": bool(self._audience)},
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create a JWT token for a user (HS256, used for tests).

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": user.id,
            "email": user.email,
            "name": user.display_name,
            "picture": user.picture,
            "exp": expire,
        }
        if self._audience:
            payload["aud"] = self._audience

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
