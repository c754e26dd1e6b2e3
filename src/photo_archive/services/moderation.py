"""Moderation state machine for submitted photos."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from photo_archive.adapters.cloudflare_images_client import ImageHost
from photo_archive.domain.errors import (
    AlreadyInStateError,
    InvalidTransitionError,
    PersistenceFailedError,
    PhotoNotFoundError,
)
from photo_archive.domain.photos import PhotoRecord, PhotoStats, PhotoStatus
from photo_archive.services.cleanup import best_effort
from photo_archive.services.photos import PhotoRepository

_logger = logging.getLogger(__name__)


@dataclass
class ModerationService:
    """Approves or rejects pending photos.

    Transitions are compare-and-swap updates on the stored status, so two
    moderators acting on the same photo cannot both win.
    """

    repository: PhotoRepository
    image_host: ImageHost
    allow_reject_approved: bool = False

    def approve(self, photo_id: UUID) -> PhotoRecord:
        """Move a pending photo to approved."""
        photo = self._get(photo_id)
        self._check_transition(photo, PhotoStatus.APPROVED)
        return self._transition(
            photo, PhotoStatus.APPROVED, approved_at=datetime.now(tz=UTC)
        )

    async def reject(self, photo_id: UUID) -> PhotoRecord:
        """Move a photo to rejected and delete its hosted image."""
        photo = self._get(photo_id)
        self._check_transition(photo, PhotoStatus.REJECTED)
        rejected = self._transition(photo, PhotoStatus.REJECTED)
        # The record keeps image_host_id and image_url for audit.
        await best_effort(
            "delete hosted image",
            lambda: self.image_host.delete(photo.image_host_id),
            photo_id=str(photo.id),
            image_host_id=photo.image_host_id,
        )
        return rejected

    def list_pending(self) -> list[PhotoRecord]:
        """Return the moderation queue, newest first."""
        return self.repository.list_photos(status=PhotoStatus.PENDING)

    def stats(self) -> PhotoStats:
        """Return photo counts per status."""
        counts = self.repository.count_by_status()
        return PhotoStats(
            pending=counts.get(PhotoStatus.PENDING, 0),
            approved=counts.get(PhotoStatus.APPROVED, 0),
            rejected=counts.get(PhotoStatus.REJECTED, 0),
        )

    def _get(self, photo_id: UUID) -> PhotoRecord:
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFoundError(photo_id)
        return photo

    def _allowed_sources(self, target: PhotoStatus) -> set[PhotoStatus]:
        if target is PhotoStatus.REJECTED and self.allow_reject_approved:
            return {PhotoStatus.PENDING, PhotoStatus.APPROVED}
        return {PhotoStatus.PENDING}

    def _check_transition(self, photo: PhotoRecord, target: PhotoStatus) -> None:
        if photo.status is target:
            raise AlreadyInStateError(photo.id, target)
        if photo.status not in self._allowed_sources(target):
            raise InvalidTransitionError(photo.id, photo.status, target)

    def _transition(
        self,
        photo: PhotoRecord,
        target: PhotoStatus,
        approved_at: datetime | None = None,
        *,
        retry: bool = True,
    ) -> PhotoRecord:
        try:
            updated = self.repository.update_status(
                photo.id,
                expected=photo.status,
                status=target,
                approved_at=approved_at,
            )
        except Exception as exc:
            _logger.exception(
                "Failed to persist status change",
                extra={"photo_id": str(photo.id), "target": target.value},
            )
            raise PersistenceFailedError(
                f"Could not save status {target.value} for photo {photo.id}"
            ) from exc
        if updated is None:
            # Another request changed the photo between our read and write.
            current = self._get(photo.id)
            _logger.warning(
                "Status changed concurrently",
                extra={"photo_id": str(photo.id), "status": current.status.value},
            )
            self._check_transition(current, target)
            if retry:
                # The new status is still an allowed source, so try once more.
                return self._transition(current, target, approved_at, retry=False)
            raise InvalidTransitionError(photo.id, current.status, target)
        _logger.info(
            "Photo moderated",
            extra={"photo_id": str(photo.id), "status": target.value},
        )
        return updated
