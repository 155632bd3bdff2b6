"""Exceptions raised by the Ziora core."""

from uuid import UUID


class ZioraError(Exception):
    """Base class for Ziora errors."""


class TransportError(ZioraError):
    """A call to the photo store, blob store or identity provider failed."""


class ImageNotFound(ZioraError):
    """The requested image payload does not exist in the blob store."""

    def __init__(self, image_ref: str) -> None:
        super().__init__(f"Image not found: {image_ref}")
        self.image_ref = image_ref


class PayloadTooLarge(ZioraError):
    """The image payload exceeds the configured size bound."""

    def __init__(self, image_ref: str, max_bytes: int) -> None:
        super().__init__(f"Image {image_ref} exceeds {max_bytes} bytes")
        self.image_ref = image_ref
        self.max_bytes = max_bytes


class NotSignedIn(ZioraError):
    """The caller has no valid identity."""


class RegionBlocked(ZioraError):
    """Submissions from the caller's country are not accepted."""

    def __init__(self, country_code: str) -> None:
        super().__init__(
            f"Service is not available in your region ({country_code})."
        )
        self.country_code = country_code


class PhotoNotFound(ZioraError):
    """No photo exists with the given id."""

    def __init__(self, photo_id: UUID) -> None:
        super().__init__(f"Photo not found: {photo_id}")
        self.photo_id = photo_id


class NotPhotoOwner(ZioraError):
    """The caller does not own the photo they are trying to change."""
