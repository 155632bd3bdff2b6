"""Photo submission and ownership actions."""

import logging
import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from ziora.domain.errors import (
    NotPhotoOwner,
    NotSignedIn,
    PhotoNotFound,
    RegionBlocked,
    TransportError,
)
from ziora.domain.photos import (
    NewPhoto,
    PhotoLocation,
    PhotoRecord,
    PhotoStatus,
    SubmittedPhoto,
)
from ziora.services.images import BlobStore
from ziora.services.randomness import RandomSource
from ziora.services.sampling import PhotoQueryRepository

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


class PhotoRepository(PhotoQueryRepository, Protocol):
    """Persistence interface for photo metadata."""

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Create a photo row and return it."""

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""

    def set_status(self, photo_id: UUID, status: PhotoStatus) -> None:
        """Update the status of a photo."""

    def update_place_names(  # noqa: PLR0913
        self,
        photo_id: UUID,
        country: str,
        region: str,
        city: str,
        sub_locality: str,
    ) -> None:
        """Overwrite the human-readable place names of a photo."""

    def delete_photo(self, photo_id: UUID) -> None:
        """Delete a photo row."""

    def list_by_owner(
        self, owner_id: UUID, limit: int, before: datetime | None = None
    ) -> list[PhotoRecord]:
        """Return an owner's active photos, newest first."""

    def latest_photo(self) -> PhotoRecord | None:
        """Return the newest active photo."""

    def existing_ids(self, photo_ids: list[UUID]) -> set[UUID]:
        """Return the subset of ids that still have a row."""


@dataclass
class PhotoService:
    """Application service for submitting and managing photos."""

    repository: PhotoRepository
    blob_store: BlobStore
    blocked_country_codes: set[str] = field(default_factory=set)
    photo_ttl_days: int = 7
    rng: RandomSource = field(default_factory=random.Random)

    async def submit(
        self,
        owner_id: UUID | None,
        image: bytes,
        location: PhotoLocation | None,
        date_text: str | None = None,
    ) -> SubmittedPhoto:
        """Upload an image and add it to the shared pool."""
        country_code = location.country_code if location else None
        if country_code and country_code.upper() in self.blocked_country_codes:
            raise RegionBlocked(country_code)
        if owner_id is None:
            raise NotSignedIn("Please sign in to continue.")

        photo_id = uuid4()
        image_ref = f"photos/{owner_id}/{photo_id}.jpg"
        await self.blob_store.put(image_ref, image, JPEG_CONTENT_TYPE)
        new_photo = NewPhoto(
            id=photo_id,
            owner_id=owner_id,
            image_ref=image_ref,
            random_key=self.rng.random(),
            location=location,
            expire_at=datetime.now(tz=UTC) + timedelta(days=self.photo_ttl_days),
            date_text=date_text,
        )
        try:
            created = self.repository.create_photo(new_photo)
        except Exception:
            logger.exception(
                "Failed to store photo metadata, removing upload",
                extra={"image_ref": image_ref},
            )
            try:
                await self.blob_store.delete(image_ref)
            except TransportError:
                logger.exception(
                    "Failed to remove orphaned upload",
                    extra={"image_ref": image_ref},
                )
            raise
        return SubmittedPhoto(id=created.id, image_ref=created.image_ref)

    def cancel(self, owner_id: UUID, photo_id: UUID) -> None:
        """Withdraw a submission from the pool."""
        self._owned_photo(owner_id, photo_id)
        self.repository.set_status(photo_id, PhotoStatus.DELETED)

    async def delete(self, owner_id: UUID, photo_id: UUID) -> None:
        """Remove a photo row and its payload."""
        photo = self._owned_photo(owner_id, photo_id)
        self.repository.delete_photo(photo_id)
        await self.blob_store.delete(photo.image_ref)

    def update_location(  # noqa: PLR0913
        self,
        owner_id: UUID,
        photo_id: UUID,
        country: str,
        region: str,
        city: str,
        sub_locality: str | None = None,
    ) -> None:
        """Replace the place names shown for a photo."""
        self._owned_photo(owner_id, photo_id)
        self.repository.update_place_names(
            photo_id, country, region, city, sub_locality or ""
        )

    def list_mine(
        self, owner_id: UUID, limit: int = 20, before: datetime | None = None
    ) -> list[PhotoRecord]:
        """Return a page of the owner's active photos."""
        return self.repository.list_by_owner(owner_id, limit, before)

    def latest(self) -> PhotoRecord | None:
        """Return the newest photo in the pool."""
        return self.repository.latest_photo()

    def get(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id."""
        return self.repository.get_photo(photo_id)

    def existing_ids(self, photo_ids: list[UUID]) -> set[UUID]:
        """Return which of the given photos still exist."""
        if not photo_ids:
            return set()
        return self.repository.existing_ids(photo_ids)

    def _owned_photo(self, owner_id: UUID, photo_id: UUID) -> PhotoRecord:
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFound(photo_id)
        if photo.owner_id != owner_id:
            raise NotPhotoOwner(f"Photo {photo_id} belongs to another user")
        return photo
