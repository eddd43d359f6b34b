"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token.

    ``id`` is the identity provider's subject (e.g. ``auth0|64f...``) and is
    treated as an opaque string everywhere.
    """

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    picture: Optional[str] = None

    @property
    def name(self) -> str:
        """Best available human-readable name."""
        return self.display_name or self.email or self.id


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """
        Create an authentication token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated token string
        """
        ...
