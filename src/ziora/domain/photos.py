"""Domain models for submitted photos."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class PhotoStatus(StrEnum):
    """Lifecycle status of a submitted photo."""

    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class PhotoLocation:
    """Where a photo was taken, as reported by the submitting client."""

    country: str
    region: str
    city: str
    sub_locality: str | None = None
    country_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a photo stored in the shared pool."""

    id: UUID
    owner_id: UUID
    image_ref: str
    random_key: float
    status: PhotoStatus
    location: PhotoLocation | None = None
    created_at: datetime | None = None
    expire_at: datetime | None = None
    like_count: int = 0
    impression_count: int = 0
    date_text: str | None = None


@dataclass(frozen=True)
class NewPhoto:
    """Values needed to persist a freshly submitted photo."""

    id: UUID
    owner_id: UUID
    image_ref: str
    random_key: float
    location: PhotoLocation | None
    expire_at: datetime
    date_text: str | None = None


@dataclass(frozen=True)
class SubmittedPhoto:
    """Identifiers handed back after a successful submission."""

    id: UUID
    image_ref: str


@dataclass(frozen=True)
class GachaScope:
    """Region a draw is restricted to.

    Use the constructors rather than the raw fields: ``GachaScope.world()``,
    ``GachaScope.country(code)``, ``GachaScope.in_region(code, region)`` and
    ``GachaScope.in_city(code, city)``. Each variant narrows the previous one.
    """

    country_code: str | None = None
    region: str | None = None
    city: str | None = None

    @classmethod
    def world(cls) -> "GachaScope":
        return cls()

    @classmethod
    def country(cls, code: str) -> "GachaScope":
        return cls(country_code=code)

    @classmethod
    def in_region(cls, code: str, region: str) -> "GachaScope":
        return cls(country_code=code, region=region)

    @classmethod
    def in_city(cls, code: str, city: str) -> "GachaScope":
        return cls(country_code=code, city=city)

    @property
    def is_global(self) -> bool:
        return self.country_code is None

    def filters(self) -> dict[str, str]:
        """Return equality filters for active photos within this scope."""
        filters = {"status": PhotoStatus.ACTIVE.value}
        if self.country_code is None:
            return filters
        filters["country_code"] = self.country_code
        if self.region is not None:
            filters["region"] = self.region
        elif self.city is not None:
            filters["city"] = self.city
        return filters
