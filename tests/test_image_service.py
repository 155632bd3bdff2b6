"""Tests for image retrieval."""

import asyncio

import pytest

from ziora.domain.errors import ImageNotFound, PayloadTooLarge
from ziora.services.cache import InMemoryImageCache
from ziora.services.images import ImageService, thumbnail_ref_for
from tests.conftest import FakeBlobStore


def test_thumbnail_ref_for() -> None:
    assert thumbnail_ref_for("photos/u/p.jpg") == "photos/u/p_200x200.jpg"
    assert thumbnail_ref_for("photos/u/p") == "photos/u/p_200x200"
    assert thumbnail_ref_for("photos/u.v/p") == "photos/u.v/p_200x200"


def test_fetch_caches_payload() -> None:
    store = FakeBlobStore(blobs={"photos/u/p.jpg": b"jpeg"})
    service = ImageService(blob_store=store, cache=InMemoryImageCache())

    first = asyncio.run(service.fetch("photos/u/p.jpg"))
    second = asyncio.run(service.fetch("photos/u/p.jpg"))

    assert first == second == b"jpeg"
    assert store.reads == ["photos/u/p.jpg"]


def test_fetch_rejects_oversized_payload() -> None:
    store = FakeBlobStore(blobs={"photos/u/p.jpg": b"x" * 11})
    service = ImageService(
        blob_store=store, cache=InMemoryImageCache(), max_image_bytes=10
    )

    with pytest.raises(PayloadTooLarge):
        asyncio.run(service.fetch("photos/u/p.jpg"))


def test_fetch_missing_payload() -> None:
    service = ImageService(blob_store=FakeBlobStore(), cache=InMemoryImageCache())

    with pytest.raises(ImageNotFound):
        asyncio.run(service.fetch("photos/u/missing.jpg"))


def test_fetch_thumbnail_prefers_resized_copy() -> None:
    store = FakeBlobStore(
        blobs={"photos/u/p.jpg": b"original", "photos/u/p_200x200.jpg": b"thumb"}
    )
    service = ImageService(blob_store=store, cache=InMemoryImageCache())

    assert asyncio.run(service.fetch_thumbnail("photos/u/p.jpg")) == b"thumb"
    assert store.reads == ["photos/u/p_200x200.jpg"]


def test_fetch_thumbnail_falls_back_to_original() -> None:
    store = FakeBlobStore(blobs={"photos/u/p.jpg": b"original"})
    service = ImageService(blob_store=store, cache=InMemoryImageCache())

    assert asyncio.run(service.fetch_thumbnail("photos/u/p.jpg")) == b"original"
    assert store.reads == ["photos/u/p_200x200.jpg", "photos/u/p.jpg"]


def test_fetch_thumbnail_falls_back_when_thumbnail_too_large() -> None:
    store = FakeBlobStore(
        blobs={"photos/u/p.jpg": b"original", "photos/u/p_200x200.jpg": b"x" * 5}
    )
    service = ImageService(
        blob_store=store, cache=InMemoryImageCache(), max_thumbnail_bytes=4
    )

    assert asyncio.run(service.fetch_thumbnail("photos/u/p.jpg")) == b"original"


def test_fetch_thumbnail_missing_everywhere() -> None:
    service = ImageService(blob_store=FakeBlobStore(), cache=InMemoryImageCache())

    with pytest.raises(ImageNotFound):
        asyncio.run(service.fetch_thumbnail("photos/u/p.jpg"))


def test_cache_evicts_least_recently_used() -> None:
    cache = InMemoryImageCache(max_entries=2)
    cache.set("a", b"1", ttl_seconds=60)
    cache.set("b", b"2", ttl_seconds=60)
    cache.get("a")
    cache.set("c", b"3", ttl_seconds=60)

    assert cache.get("a") == b"1"
    assert cache.get("b") is None
    assert cache.get("c") == b"3"


def test_cache_expires_entries() -> None:
    cache = InMemoryImageCache()
    cache.set("a", b"1", ttl_seconds=0)

    assert cache.get("a") is None
