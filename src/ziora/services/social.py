"""Likes, reports and blocks between users."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from ziora.domain.errors import PhotoNotFound
from ziora.domain.social import LikeRecord, ReportRecord
from ziora.services.photos import PhotoRepository

logger = logging.getLogger(__name__)


class SocialRepository(Protocol):
    """Persistence interface for likes, reports and blocks."""

    def add_like(self, like: LikeRecord) -> bool:
        """Store a like; return False if the viewer already liked the photo."""

    def remove_like(self, photo_id: UUID, liker_id: UUID) -> bool:
        """Delete a like; return False if there was none."""

    def adjust_like_count(self, photo_id: UUID, delta: int) -> None:
        """Add delta to a photo's like count, never going below zero."""

    def create_report(self, report: ReportRecord) -> None:
        """Store a moderation report."""

    def block_user(self, user_id: UUID, blocked_user_id: UUID) -> None:
        """Record that a user blocked another user."""


@dataclass
class SocialService:
    """Application service for interactions with other users' photos."""

    repository: SocialRepository
    photo_repository: PhotoRepository

    def like(
        self,
        viewer_id: UUID,
        photo_id: UUID,
        liker_country: str,
        liker_country_code: str | None = None,
    ) -> bool:
        """Like a photo. Returns whether a new like was recorded."""
        photo = self.photo_repository.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFound(photo_id)
        if photo.owner_id == viewer_id:
            logger.info("Ignoring self-like", extra={"photo_id": str(photo_id)})
            return False
        added = self.repository.add_like(
            LikeRecord(
                photo_id=photo_id,
                liker_id=viewer_id,
                liker_country=liker_country,
                liker_country_code=liker_country_code or "",
            )
        )
        if added:
            self.repository.adjust_like_count(photo_id, 1)
        return added

    def unlike(self, viewer_id: UUID, photo_id: UUID) -> bool:
        """Withdraw a like. Returns whether a like was removed."""
        removed = self.repository.remove_like(photo_id, viewer_id)
        if removed:
            self.repository.adjust_like_count(photo_id, -1)
        return removed

    def report(self, reporter_id: UUID, photo_id: UUID, reason: str) -> None:
        """File a moderation report against a photo."""
        self.repository.create_report(
            ReportRecord(photo_id=photo_id, reporter_id=reporter_id, reason=reason)
        )

    def block(self, user_id: UUID, blocked_user_id: UUID) -> None:
        """Hide another user's content from this user."""
        self.repository.block_user(user_id, blocked_user_id)
