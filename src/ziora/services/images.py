"""Image payload retrieval from the blob store."""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol

from ziora.domain.errors import ImageNotFound, PayloadTooLarge
from ziora.services.cache import ImageCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_THUMBNAIL_BYTES = 1 * 1024 * 1024
THUMBNAIL_SUFFIX = "_200x200"


class BlobStore(Protocol):
    """Interface for binary payload storage."""

    async def get(self, ref: str, max_bytes: int) -> bytes:
        """Return the payload at ref.

        Raises ImageNotFound, PayloadTooLarge or TransportError.
        """

    async def put(self, ref: str, data: bytes, content_type: str) -> str:
        """Store a payload at ref and return the ref."""

    async def delete(self, ref: str) -> None:
        """Delete the payload at ref."""


@dataclass
class ImageService:
    """Fetches photo payloads with size bounds and caching."""

    blob_store: BlobStore
    cache: ImageCache
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    max_thumbnail_bytes: int = DEFAULT_MAX_THUMBNAIL_BYTES
    cache_ttl_seconds: int = 3600

    async def fetch(self, image_ref: str) -> bytes:
        """Return the full-size payload for an image ref."""
        return await self._fetch_cached(image_ref, self.max_image_bytes)

    async def fetch_thumbnail(self, image_ref: str) -> bytes:
        """Return the 200x200 thumbnail, falling back to the original."""
        thumbnail_ref = thumbnail_ref_for(image_ref)
        try:
            return await self._fetch_cached(thumbnail_ref, self.max_thumbnail_bytes)
        except (ImageNotFound, PayloadTooLarge):
            logger.info(
                "Thumbnail unavailable, falling back to original",
                extra={"image_ref": image_ref},
            )
            return await self.fetch(image_ref)

    async def _fetch_cached(self, ref: str, max_bytes: int) -> bytes:
        cached = self.cache.get(ref)
        if cached is not None:
            return cached
        data = await self.blob_store.get(ref, max_bytes)
        if len(data) > max_bytes:
            raise PayloadTooLarge(ref, max_bytes)
        self.cache.set(ref, data, self.cache_ttl_seconds)
        return data


def thumbnail_ref_for(image_ref: str) -> str:
    """Return the storage path of the resized copy of an image.

    ``photos/u/p.jpg`` becomes ``photos/u/p_200x200.jpg``.
    """
    path = PurePosixPath(image_ref)
    if not path.suffix:
        return f"{image_ref}{THUMBNAIL_SUFFIX}"
    return str(path.with_name(f"{path.stem}{THUMBNAIL_SUFFIX}{path.suffix}"))
