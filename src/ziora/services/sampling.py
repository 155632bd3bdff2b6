"""Random photo selection over the shared pool."""

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from ziora.domain.photos import GachaScope, PhotoRecord
from ziora.services.randomness import RandomSource

logger = logging.getLogger(__name__)


class PhotoQueryRepository(Protocol):
    """Read access to photos ordered by their random key."""

    def list_by_random_key(
        self,
        filters: dict[str, str],
        *,
        at_least: float | None = None,
        below: float | None = None,
        limit: int = 1,
    ) -> list[PhotoRecord]:
        """Return photos matching filters, ascending by random key.

        ``at_least`` keeps keys ``>=`` the bound, ``below`` keeps keys ``<`` it.
        """

    def list_created_after(self, after: datetime, limit: int) -> list[PhotoRecord]:
        """Return active photos created after a moment, newest first."""


@dataclass
class RandomPhotoSampler:
    """Draws one photo from a scope, approximately uniformly.

    Every photo carries a ``random_key`` fixed at creation. A draw picks a
    seed in [0, 1) and takes the first photo whose key is at or above it; if
    the seed lands past the largest key, the key space wraps around and the
    smallest key wins. A photo is picked with probability proportional to the
    gap below its key, which is close enough to uniform for discovery.
    """

    repository: PhotoQueryRepository
    rng: RandomSource = field(default_factory=random.Random)
    batch_size: int = 10
    max_redraws: int = 3

    def sample(
        self,
        scope: GachaScope,
        excluded_owner_id: UUID | None = None,
        excluded_photo_ids: Iterable[UUID] = frozenset(),
    ) -> PhotoRecord | None:
        """Return a random active photo in scope, or None if there is none."""
        filters = scope.filters()
        excluded_ids = frozenset(excluded_photo_ids)
        has_exclusions = excluded_owner_id is not None or bool(excluded_ids)
        limit = self.batch_size if has_exclusions else 1

        for attempt in range(self.max_redraws + 1):
            seed = self.rng.random()
            forward = self.repository.list_by_random_key(
                filters, at_least=seed, limit=limit
            )
            picked = _first_allowed(forward, excluded_owner_id, excluded_ids)
            if picked:
                return picked
            backward = self.repository.list_by_random_key(
                filters, below=seed, limit=limit
            )
            picked = _first_allowed(backward, excluded_owner_id, excluded_ids)
            if picked:
                return picked
            if not forward and not backward:
                return None
            logger.info(
                "Every candidate was excluded, redrawing",
                extra={"attempt": attempt + 1, "filters": filters},
            )
        return None

    def sample_recent(
        self,
        after: datetime,
        excluded_owner_id: UUID | None = None,
        excluded_photo_ids: Iterable[UUID] = frozenset(),
        limit: int = 50,
    ) -> PhotoRecord | None:
        """Return a random photo among those created after a moment."""
        excluded_ids = frozenset(excluded_photo_ids)
        candidates = [
            photo
            for photo in self.repository.list_created_after(after, limit)
            if _is_allowed(photo, excluded_owner_id, excluded_ids)
        ]
        if not candidates:
            return None
        return candidates[self.rng.randint(0, len(candidates) - 1)]


def _first_allowed(
    photos: list[PhotoRecord],
    excluded_owner_id: UUID | None,
    excluded_ids: frozenset[UUID],
) -> PhotoRecord | None:
    for photo in photos:
        if _is_allowed(photo, excluded_owner_id, excluded_ids):
            return photo
    return None


def _is_allowed(
    photo: PhotoRecord, excluded_owner_id: UUID | None, excluded_ids: frozenset[UUID]
) -> bool:
    if excluded_owner_id is not None and photo.owner_id == excluded_owner_id:
        return False
    return photo.id not in excluded_ids
