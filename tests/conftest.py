"""Shared test fixtures."""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from ziora.config import Settings
from ziora.containers import AppContainer, draw_session_factory
from ziora.domain.errors import ImageNotFound, PayloadTooLarge
from ziora.domain.photos import (
    NewPhoto,
    PhotoLocation,
    PhotoRecord,
    PhotoStatus,
)
from ziora.domain.social import LikeRecord, ReportRecord
from ziora.services.ads import AdCadenceGate
from ziora.services.cache import InMemoryImageCache
from ziora.services.draws import DrawSessionRegistry
from ziora.services.identity import IdentityProvider, IdentityService
from ziora.services.images import BlobStore, ImageService
from ziora.services.photos import PhotoRepository, PhotoService
from ziora.services.sampling import RandomPhotoSampler
from ziora.services.social import SocialRepository, SocialService


@dataclass
class ScriptedRandom:
    """Random source that replays fixed values, then repeats the last one."""

    floats: list[float] = field(default_factory=lambda: [0.5])
    ints: list[int] = field(default_factory=lambda: [2])

    def random(self) -> float:
        return self.floats.pop(0) if len(self.floats) > 1 else self.floats[0]

    def randint(self, a: int, b: int) -> int:
        value = self.ints.pop(0) if len(self.ints) > 1 else self.ints[0]
        return min(max(value, a), b)


def make_photo(  # noqa: PLR0913
    random_key: float,
    *,
    owner_id: UUID | None = None,
    country_code: str | None = "JP",
    region: str = "Tokyo",
    city: str = "Minato",
    status: PhotoStatus = PhotoStatus.ACTIVE,
    created_at: datetime | None = None,
) -> PhotoRecord:
    photo_id = uuid4()
    owner = owner_id or uuid4()
    return PhotoRecord(
        id=photo_id,
        owner_id=owner,
        image_ref=f"photos/{owner}/{photo_id}.jpg",
        random_key=random_key,
        status=status,
        location=PhotoLocation(
            country="Japan", region=region, city=city, country_code=country_code
        ),
        created_at=created_at or datetime.now(tz=UTC),
    )


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: dict[UUID, PhotoRecord] = field(default_factory=dict)
    queries: list[dict[str, object]] = field(default_factory=list)
    fail_create: bool = False

    def add(self, *photos: PhotoRecord) -> None:
        for photo in photos:
            self.photos[photo.id] = photo

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        if self.fail_create:
            raise RuntimeError("Failed to create photo metadata")
        record = PhotoRecord(
            id=photo.id,
            owner_id=photo.owner_id,
            image_ref=photo.image_ref,
            random_key=photo.random_key,
            status=PhotoStatus.ACTIVE,
            location=photo.location,
            created_at=datetime.now(tz=UTC),
            expire_at=photo.expire_at,
            date_text=photo.date_text,
        )
        self.photos[photo.id] = record
        return record

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        return self.photos.get(photo_id)

    def list_by_random_key(
        self,
        filters: dict[str, str],
        *,
        at_least: float | None = None,
        below: float | None = None,
        limit: int = 1,
    ) -> list[PhotoRecord]:
        self.queries.append(
            {"filters": dict(filters), "at_least": at_least, "below": below}
        )
        matches = [
            photo
            for photo in self.photos.values()
            if all(_column(photo, column) == value for column, value in filters.items())
            and (at_least is None or photo.random_key >= at_least)
            and (below is None or photo.random_key < below)
        ]
        return sorted(matches, key=lambda photo: photo.random_key)[:limit]

    def list_created_after(self, after: datetime, limit: int) -> list[PhotoRecord]:
        matches = [
            photo
            for photo in self._active()
            if photo.created_at is not None and photo.created_at > after
        ]
        return sorted(matches, key=lambda photo: photo.created_at, reverse=True)[
            :limit
        ]

    def list_by_owner(
        self, owner_id: UUID, limit: int, before: datetime | None = None
    ) -> list[PhotoRecord]:
        matches = [
            photo
            for photo in self._active()
            if photo.owner_id == owner_id
            and (before is None or photo.created_at < before)
        ]
        return sorted(matches, key=lambda photo: photo.created_at, reverse=True)[
            :limit
        ]

    def latest_photo(self) -> PhotoRecord | None:
        active = sorted(self._active(), key=lambda photo: photo.created_at)
        return active[-1] if active else None

    def existing_ids(self, photo_ids: list[UUID]) -> set[UUID]:
        return {photo_id for photo_id in photo_ids if photo_id in self.photos}

    def set_status(self, photo_id: UUID, status: PhotoStatus) -> None:
        self.photos[photo_id] = replace(self.photos[photo_id], status=status)

    def update_place_names(  # noqa: PLR0913
        self,
        photo_id: UUID,
        country: str,
        region: str,
        city: str,
        sub_locality: str,
    ) -> None:
        photo = self.photos[photo_id]
        location = replace(
            photo.location or PhotoLocation(country="", region="", city=""),
            country=country,
            region=region,
            city=city,
            sub_locality=sub_locality,
        )
        self.photos[photo_id] = replace(photo, location=location)

    def delete_photo(self, photo_id: UUID) -> None:
        self.photos.pop(photo_id, None)

    def adjust_like_count(self, photo_id: UUID, delta: int) -> None:
        photo = self.photos[photo_id]
        self.photos[photo_id] = replace(
            photo, like_count=max(photo.like_count + delta, 0)
        )

    def _active(self) -> Iterable[PhotoRecord]:
        return (
            photo
            for photo in self.photos.values()
            if photo.status == PhotoStatus.ACTIVE
        )


def _column(photo: PhotoRecord, column: str) -> object:
    if column == "status":
        return photo.status.value
    if photo.location is None:
        return None
    return getattr(photo.location, column)


@dataclass
class FakeBlobStore(BlobStore):
    """Dict-backed blob store for tests."""

    blobs: dict[str, bytes] = field(default_factory=dict)
    reads: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    async def get(self, ref: str, max_bytes: int) -> bytes:
        self.reads.append(ref)
        if ref not in self.blobs:
            raise ImageNotFound(ref)
        data = self.blobs[ref]
        if len(data) > max_bytes:
            raise PayloadTooLarge(ref, max_bytes)
        return data

    async def put(self, ref: str, data: bytes, content_type: str) -> str:
        self.blobs[ref] = data
        return ref

    async def delete(self, ref: str) -> None:
        self.deleted.append(ref)
        self.blobs.pop(ref, None)


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider backed by a token table."""

    tokens: dict[str, UUID] = field(default_factory=dict)

    def resolve(self, access_token: str) -> UUID | None:
        return self.tokens.get(access_token)


@dataclass
class InMemorySocialRepository(SocialRepository):
    """In-memory social repository for tests."""

    photo_repository: InMemoryPhotoRepository
    likes: dict[tuple[UUID, UUID], LikeRecord] = field(default_factory=dict)
    reports: list[ReportRecord] = field(default_factory=list)
    blocks: set[tuple[UUID, UUID]] = field(default_factory=set)

    def add_like(self, like: LikeRecord) -> bool:
        key = (like.photo_id, like.liker_id)
        if key in self.likes:
            return False
        self.likes[key] = like
        return True

    def remove_like(self, photo_id: UUID, liker_id: UUID) -> bool:
        return self.likes.pop((photo_id, liker_id), None) is not None

    def adjust_like_count(self, photo_id: UUID, delta: int) -> None:
        self.photo_repository.adjust_like_count(photo_id, delta)

    def create_report(self, report: ReportRecord) -> None:
        self.reports.append(report)

    def block_user(self, user_id: UUID, blocked_user_id: UUID) -> None:
        self.blocks.add((user_id, blocked_user_id))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def photo_repository() -> InMemoryPhotoRepository:
    return InMemoryPhotoRepository()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def image_service(blob_store: FakeBlobStore) -> ImageService:
    return ImageService(blob_store=blob_store, cache=InMemoryImageCache())


@pytest.fixture
def container(
    settings: Settings,
    photo_repository: InMemoryPhotoRepository,
    blob_store: FakeBlobStore,
    identity_provider: FakeIdentityProvider,
    image_service: ImageService,
) -> AppContainer:
    gate = AdCadenceGate(rng=ScriptedRandom(ints=[2]))
    sampler = RandomPhotoSampler(photo_repository, rng=ScriptedRandom())

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_service=IdentityService(identity_provider),
        photo_service=PhotoService(
            repository=photo_repository,
            blob_store=blob_store,
            blocked_country_codes={"KP"},
        ),
        image_service=image_service,
        social_service=SocialService(
            repository=InMemorySocialRepository(photo_repository),
            photo_repository=photo_repository,
        ),
        draw_sessions=DrawSessionRegistry(
            factory=draw_session_factory(gate, sampler, image_service)
        ),
        close_resources=close_resources,
    )
