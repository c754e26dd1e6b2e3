"""Photo record persistence interface and read queries."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from photo_archive.domain.photos import NewPhoto, PhotoRecord, PhotoStatus


class PhotoRepository(Protocol):
    """Persistence interface for photo records."""

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Persist a new photo record and return it with its assigned id."""

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo record by id, if present."""

    def update_status(
        self,
        photo_id: UUID,
        expected: PhotoStatus,
        status: PhotoStatus,
        approved_at: datetime | None = None,
    ) -> PhotoRecord | None:
        """Change status only if the record still has the expected status.

        Returns the updated record, or None when no record matched.
        """

    def list_photos(
        self, status: PhotoStatus | None = None, floor_id: str | None = None
    ) -> list[PhotoRecord]:
        """Return matching records, most recently submitted first."""

    def count_by_status(self) -> dict[PhotoStatus, int]:
        """Return the number of records per status."""

    def ping(self) -> bool:
        """Return true when the store is reachable."""


@dataclass
class PhotoService:
    """Read-side queries over submitted photos."""

    repository: PhotoRepository

    def list_photos(
        self, status: PhotoStatus | None = None, floor_id: str | None = None
    ) -> list[PhotoRecord]:
        """Return photos filtered by status and floor, newest first."""
        return self.repository.list_photos(status=status, floor_id=floor_id or None)

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a single photo, if present."""
        return self.repository.get_photo(photo_id)
