"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass
from uuid import UUID

import httpx
from supabase import AuthApiError, Client

from ziora.domain.errors import TransportError
from ziora.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves access tokens issued by Supabase Auth."""

    client: Client

    def resolve(self, access_token: str) -> UUID | None:
        """Return the user id behind an access token."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError:
            logger.info("Rejected access token")
            return None
        except httpx.HTTPError as exc:
            raise TransportError(f"Supabase Auth request failed: {exc}") from exc
        if response is None or response.user is None:
            return None
        return UUID(str(response.user.id))
