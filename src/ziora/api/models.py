"""Pydantic models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ziora.domain.photos import PhotoLocation, PhotoRecord


class LocationPayload(BaseModel):
    """Where a photo was taken."""

    country: str = "Unknown"
    region: str = "Unknown"
    city: str = "Unknown"
    sub_locality: str | None = None
    country_code: str | None = Field(default=None, max_length=2)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    def to_domain(self) -> PhotoLocation:
        return PhotoLocation(**self.model_dump())

    @classmethod
    def from_domain(cls, location: PhotoLocation) -> "LocationPayload":
        return cls(
            country=location.country,
            region=location.region,
            city=location.city,
            sub_locality=location.sub_locality,
            country_code=location.country_code,
            latitude=location.latitude,
            longitude=location.longitude,
        )


class SubmitPhotoRequest(BaseModel):
    """Photo submission payload."""

    image_base64: str
    location: LocationPayload | None = None
    date_text: str | None = None


class SubmitPhotoResponse(BaseModel):
    """Identifiers of a stored submission."""

    id: UUID
    image_ref: str


class PhotoPayload(BaseModel):
    """Photo metadata returned to clients."""

    id: UUID
    owner_id: UUID
    image_ref: str
    location: LocationPayload | None = None
    created_at: datetime | None = None
    expire_at: datetime | None = None
    like_count: int = 0
    date_text: str | None = None

    @classmethod
    def from_domain(cls, photo: PhotoRecord) -> "PhotoPayload":
        return cls(
            id=photo.id,
            owner_id=photo.owner_id,
            image_ref=photo.image_ref,
            location=(
                LocationPayload.from_domain(photo.location) if photo.location else None
            ),
            created_at=photo.created_at,
            expire_at=photo.expire_at,
            like_count=photo.like_count,
            date_text=photo.date_text,
        )


class DrawResponse(BaseModel):
    """Outcome of a draw."""

    kind: str
    draw_count: int
    photo: PhotoPayload | None = None
    image_base64: str | None = None


class LikeRequest(BaseModel):
    """Like payload carrying the liker's country for notifications."""

    country: str = "Unknown"
    country_code: str | None = None


class ReportRequest(BaseModel):
    """Moderation report payload."""

    reason: str = Field(min_length=1, max_length=500)


class BlockRequest(BaseModel):
    """Block payload."""

    blocked_user_id: UUID


class LocationUpdateRequest(BaseModel):
    """Owner edit of a photo's place names."""

    country: str
    region: str
    city: str
    sub_locality: str | None = None


class ImageResponse(BaseModel):
    """Full-size image payload."""

    image_base64: str


class ExistingPhotosRequest(BaseModel):
    """Ids a client wants to check, e.g. its liked photos."""

    photo_ids: list[UUID] = Field(max_length=200)


class ExistingPhotosResponse(BaseModel):
    """Subset of the requested ids that still exist."""

    photo_ids: list[UUID]
