"""Tests for likes, reports and blocks."""

from uuid import uuid4

import pytest

from ziora.domain.errors import PhotoNotFound
from ziora.services.social import SocialService
from tests.conftest import InMemoryPhotoRepository, InMemorySocialRepository, make_photo


def _service() -> tuple[SocialService, InMemorySocialRepository]:
    photos = InMemoryPhotoRepository()
    repository = InMemorySocialRepository(photos)
    return SocialService(repository=repository, photo_repository=photos), repository


def test_like_increments_count_once() -> None:
    service, repository = _service()
    photo = make_photo(0.5)
    repository.photo_repository.add(photo)
    viewer = uuid4()

    assert service.like(viewer, photo.id, "France", "FR") is True
    assert service.like(viewer, photo.id, "France", "FR") is False

    assert repository.photo_repository.photos[photo.id].like_count == 1
    like = repository.likes[(photo.id, viewer)]
    assert like.liker_country_code == "FR"


def test_self_like_is_ignored() -> None:
    service, repository = _service()
    photo = make_photo(0.5)
    repository.photo_repository.add(photo)

    assert service.like(photo.owner_id, photo.id, "Japan") is False
    assert repository.likes == {}


def test_like_unknown_photo() -> None:
    service, _ = _service()

    with pytest.raises(PhotoNotFound):
        service.like(uuid4(), uuid4(), "Japan")


def test_unlike_decrements_count() -> None:
    service, repository = _service()
    photo = make_photo(0.5)
    repository.photo_repository.add(photo)
    viewer = uuid4()
    service.like(viewer, photo.id, "Spain", None)

    assert service.unlike(viewer, photo.id) is True
    assert service.unlike(viewer, photo.id) is False
    assert repository.photo_repository.photos[photo.id].like_count == 0


def test_report_and_block() -> None:
    service, repository = _service()
    reporter = uuid4()
    photo_id = uuid4()
    blocked = uuid4()

    service.report(reporter, photo_id, "spam")
    service.block(reporter, blocked)

    assert repository.reports[0].reason == "spam"
    assert repository.reports[0].status == "pending"
    assert (reporter, blocked) in repository.blocks
