"""Caller identity resolution."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from ziora.domain.errors import NotSignedIn


class IdentityProvider(Protocol):
    """Interface for turning an access token into a user id."""

    def resolve(self, access_token: str) -> UUID | None:
        """Return the user id for a token, or None if it is not valid."""


@dataclass
class IdentityService:
    """Application service for identifying callers."""

    provider: IdentityProvider

    def identify(self, access_token: str | None) -> UUID | None:
        """Return the caller's id, or None for anonymous callers."""
        if not access_token:
            return None
        return self.provider.resolve(access_token)

    def require(self, access_token: str | None) -> UUID:
        """Return the caller's id or raise NotSignedIn."""
        user_id = self.identify(access_token)
        if user_id is None:
            raise NotSignedIn("Please sign in to continue.")
        return user_id
