"""Tests for the moderation state machine."""

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from photo_archive.domain.errors import (
    AlreadyInStateError,
    InvalidTransitionError,
    PersistenceFailedError,
    PhotoNotFoundError,
)
from photo_archive.domain.photos import PhotoRecord, PhotoStatus
from photo_archive.services.moderation import ModerationService
from tests.conftest import FakeImageHost, InMemoryPhotoRepository, make_photo


def test_approve_sets_status_and_timestamp(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository)
    service = ModerationService(photo_repository, image_host)

    approved = service.approve(photo.id)

    assert approved.status is PhotoStatus.APPROVED
    assert approved.approved_at is not None
    assert photo_repository.photos[photo.id].status is PhotoStatus.APPROVED
    assert image_host.deleted == []


def test_approve_twice_fails_and_keeps_record(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository)
    service = ModerationService(photo_repository, image_host)
    approved = service.approve(photo.id)

    with pytest.raises(AlreadyInStateError):
        service.approve(photo.id)

    assert photo_repository.photos[photo.id] == approved


def test_approve_rejected_photo_is_invalid(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository, status=PhotoStatus.REJECTED)
    service = ModerationService(photo_repository, image_host)

    with pytest.raises(InvalidTransitionError):
        service.approve(photo.id)

    assert photo_repository.update_calls == []


def test_unknown_photo_is_not_found(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    service = ModerationService(photo_repository, image_host)

    with pytest.raises(PhotoNotFoundError):
        service.approve(uuid4())
    with pytest.raises(PhotoNotFoundError):
        asyncio.run(service.reject(uuid4()))


def test_reject_deletes_hosted_image_once(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository, image_host_id="cf-123")
    service = ModerationService(photo_repository, image_host)

    rejected = asyncio.run(service.reject(photo.id))

    assert rejected.status is PhotoStatus.REJECTED
    assert rejected.image_host_id == "cf-123"
    assert image_host.deleted == ["cf-123"]


def test_reject_proceeds_when_image_delete_fails(
    photo_repository: InMemoryPhotoRepository,
) -> None:
    image_host = FakeImageHost(delete_error=RuntimeError("cloudflare down"))
    photo = make_photo(photo_repository, image_host_id="cf-456")
    service = ModerationService(photo_repository, image_host)

    rejected = asyncio.run(service.reject(photo.id))

    assert rejected.status is PhotoStatus.REJECTED
    assert image_host.deleted == ["cf-456"]


def test_reject_twice_fails_without_second_delete(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository)
    service = ModerationService(photo_repository, image_host)
    asyncio.run(service.reject(photo.id))

    with pytest.raises(AlreadyInStateError):
        asyncio.run(service.reject(photo.id))

    assert len(image_host.deleted) == 1


def test_reject_approved_photo_is_invalid_by_default(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository, status=PhotoStatus.APPROVED)
    service = ModerationService(photo_repository, image_host)

    with pytest.raises(InvalidTransitionError):
        asyncio.run(service.reject(photo.id))

    assert image_host.deleted == []
    assert photo_repository.photos[photo.id].status is PhotoStatus.APPROVED


def test_reject_approved_photo_when_allowed(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    photo = make_photo(photo_repository, status=PhotoStatus.APPROVED)
    service = ModerationService(
        photo_repository, image_host, allow_reject_approved=True
    )

    rejected = asyncio.run(service.reject(photo.id))

    assert rejected.status is PhotoStatus.REJECTED
    assert photo_repository.update_calls == [
        (photo.id, PhotoStatus.APPROVED, PhotoStatus.REJECTED)
    ]


def test_persistence_failure_leaves_status_unchanged(
    image_host: FakeImageHost,
) -> None:
    repository = InMemoryPhotoRepository(fail_update=True)
    photo = make_photo(repository)
    service = ModerationService(repository, image_host)

    with pytest.raises(PersistenceFailedError):
        asyncio.run(service.reject(photo.id))

    assert repository.photos[photo.id].status is PhotoStatus.PENDING
    assert image_host.deleted == []


@dataclass
class RacingPhotoRepository(InMemoryPhotoRepository):
    """Applies a competing status change right before each conditional update."""

    competing_status: PhotoStatus = PhotoStatus.APPROVED

    def update_status(
        self,
        photo_id: UUID,
        expected: PhotoStatus,
        status: PhotoStatus,
        approved_at: datetime | None = None,
    ) -> PhotoRecord | None:
        current = self.photos[photo_id]
        self.photos[photo_id] = replace(current, status=self.competing_status)
        return super().update_status(photo_id, expected, status, approved_at)


def test_concurrent_approve_makes_reject_fail_without_deleting_image(
    image_host: FakeImageHost,
) -> None:
    repository = RacingPhotoRepository(competing_status=PhotoStatus.APPROVED)
    photo = make_photo(repository)
    service = ModerationService(repository, image_host)

    with pytest.raises(InvalidTransitionError):
        asyncio.run(service.reject(photo.id))

    assert repository.photos[photo.id].status is PhotoStatus.APPROVED
    assert image_host.deleted == []


def test_concurrent_approve_makes_second_approve_already_in_state(
    image_host: FakeImageHost,
) -> None:
    repository = RacingPhotoRepository(competing_status=PhotoStatus.APPROVED)
    photo = make_photo(repository)
    service = ModerationService(repository, image_host)

    with pytest.raises(AlreadyInStateError):
        service.approve(photo.id)


def test_pending_queue_and_stats(
    photo_repository: InMemoryPhotoRepository, image_host: FakeImageHost
) -> None:
    older = make_photo(
        photo_repository,
        submitted_at=datetime.fromisoformat("2024-01-01T00:00:00+00:00"),
    )
    newer = make_photo(
        photo_repository,
        submitted_at=datetime.fromisoformat("2024-02-01T00:00:00+00:00"),
    )
    make_photo(photo_repository, status=PhotoStatus.APPROVED)
    make_photo(photo_repository, status=PhotoStatus.REJECTED)
    make_photo(photo_repository, status=PhotoStatus.REJECTED)
    service = ModerationService(photo_repository, image_host)

    pending = service.list_pending()
    stats = service.stats()

    assert [photo.id for photo in pending] == [newer.id, older.id]
    assert (stats.pending, stats.approved, stats.rejected) == (2, 1, 2)
    assert stats.total == 5


def test_reject_retries_when_race_lands_on_allowed_source(
    image_host: FakeImageHost,
) -> None:
    repository = RacingPhotoRepository(competing_status=PhotoStatus.APPROVED)
    photo = make_photo(repository, image_host_id="cf-7")
    service = ModerationService(repository, image_host, allow_reject_approved=True)

    rejected = asyncio.run(service.reject(photo.id))

    assert rejected.status is PhotoStatus.REJECTED
    assert repository.photos[photo.id].status is PhotoStatus.REJECTED
    assert image_host.deleted == ["cf-7"]
