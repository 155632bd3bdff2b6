"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from ziora.adapters.supabase_query import execute
from ziora.domain.photos import NewPhoto, PhotoLocation, PhotoRecord, PhotoStatus
from ziora.services.photos import PhotoRepository

_COLUMNS = (
    "id, owner_id, image_path, country, region, city, sub_locality, "
    "country_code, latitude, longitude, created_at, expire_at, random_key, "
    "status, like_count, impression_count, date_text"
)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo metadata persistence."""

    client: Client
    table: str = "photos"

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Insert a photo row and return it."""
        payload: dict[str, object] = {
            "id": str(photo.id),
            "owner_id": str(photo.owner_id),
            "image_path": photo.image_ref,
            "random_key": photo.random_key,
            "status": PhotoStatus.ACTIVE.value,
            "like_count": 0,
            "impression_count": 0,
            "expire_at": photo.expire_at.isoformat(),
            "date_text": photo.date_text,
        }
        if photo.location:
            payload.update(_location_payload(photo.location))
        response = execute(self.client.table(self.table).insert(payload))
        if not response.data:
            raise RuntimeError("Failed to create photo metadata")
        return _parse_photo(response.data[0])

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        response = execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("id", str(photo_id))
            .limit(1)
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def list_by_random_key(
        self,
        filters: dict[str, str],
        *,
        at_least: float | None = None,
        below: float | None = None,
        limit: int = 1,
    ) -> list[PhotoRecord]:
        """Return filtered photos ascending by random key."""
        query = self.client.table(self.table).select(_COLUMNS)
        for column, value in filters.items():
            query = query.eq(column, value)
        if at_least is not None:
            query = query.gte("random_key", at_least)
        if below is not None:
            query = query.lt("random_key", below)
        response = execute(query.order("random_key", desc=False).limit(limit))
        return [_parse_photo(row) for row in response.data or []]

    def list_created_after(self, after: datetime, limit: int) -> list[PhotoRecord]:
        """Return active photos created after a moment, newest first."""
        response = execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("status", PhotoStatus.ACTIVE.value)
            .gt("created_at", after.isoformat())
            .order("created_at", desc=True)
            .limit(limit)
        )
        return [_parse_photo(row) for row in response.data or []]

    def list_by_owner(
        self, owner_id: UUID, limit: int, before: datetime | None = None
    ) -> list[PhotoRecord]:
        """Return an owner's active photos, newest first."""
        query = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("status", PhotoStatus.ACTIVE.value)
        )
        if before is not None:
            query = query.lt("created_at", before.isoformat())
        response = execute(query.order("created_at", desc=True).limit(limit))
        return [_parse_photo(row) for row in response.data or []]

    def latest_photo(self) -> PhotoRecord | None:
        """Return the newest active photo."""
        response = execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("status", PhotoStatus.ACTIVE.value)
            .order("created_at", desc=True)
            .limit(1)
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def existing_ids(self, photo_ids: list[UUID]) -> set[UUID]:
        """Return the ids that still have a row."""
        response = execute(
            self.client.table(self.table)
            .select("id")
            .in_("id", [str(photo_id) for photo_id in photo_ids])
        )
        return {UUID(row["id"]) for row in response.data or []}

    def set_status(self, photo_id: UUID, status: PhotoStatus) -> None:
        """Update the status of a photo."""
        execute(
            self.client.table(self.table)
            .update({"status": status.value})
            .eq("id", str(photo_id))
        )

    def update_place_names(  # noqa: PLR0913
        self,
        photo_id: UUID,
        country: str,
        region: str,
        city: str,
        sub_locality: str,
    ) -> None:
        """Overwrite the place names of a photo."""
        execute(
            self.client.table(self.table)
            .update(
                {
                    "country": country,
                    "region": region,
                    "city": city,
                    "sub_locality": sub_locality,
                }
            )
            .eq("id", str(photo_id))
        )

    def delete_photo(self, photo_id: UUID) -> None:
        """Delete a photo row."""
        execute(self.client.table(self.table).delete().eq("id", str(photo_id)))


def _location_payload(location: PhotoLocation) -> dict[str, object]:
    payload: dict[str, object] = {
        "country": location.country,
        "region": location.region,
        "city": location.city,
    }
    if location.sub_locality:
        payload["sub_locality"] = location.sub_locality
    if location.country_code:
        payload["country_code"] = location.country_code
    if location.latitude is not None:
        payload["latitude"] = location.latitude
    if location.longitude is not None:
        payload["longitude"] = location.longitude
    return payload


def _parse_photo(row: dict[str, object]) -> PhotoRecord:
    return PhotoRecord(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        image_ref=str(row["image_path"]),
        random_key=float(row["random_key"]),
        status=PhotoStatus(row.get("status", PhotoStatus.ACTIVE.value)),
        location=_parse_location(row),
        created_at=_parse_timestamp(row.get("created_at")),
        expire_at=_parse_timestamp(row.get("expire_at")),
        like_count=int(row.get("like_count") or 0),
        impression_count=int(row.get("impression_count") or 0),
        date_text=row.get("date_text") or None,
    )


def _parse_location(row: dict[str, object]) -> PhotoLocation | None:
    if row.get("country") is None:
        return None
    latitude = row.get("latitude")
    longitude = row.get("longitude")
    return PhotoLocation(
        country=str(row["country"]),
        region=str(row.get("region") or ""),
        city=str(row.get("city") or ""),
        sub_locality=row.get("sub_locality") or None,
        country_code=row.get("country_code") or None,
        latitude=float(latitude) if latitude is not None else None,
        longitude=float(longitude) if longitude is not None else None,
    )


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None
