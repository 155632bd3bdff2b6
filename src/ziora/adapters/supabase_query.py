"""Shared helpers for Supabase PostgREST queries."""

from typing import Any

import httpx
from postgrest.exceptions import APIError

from ziora.domain.errors import TransportError


def execute(query: Any) -> Any:  # noqa: ANN401
    """Run a query builder, reporting failures as TransportError."""
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as exc:
        raise TransportError(f"Supabase query failed: {exc}") from exc
