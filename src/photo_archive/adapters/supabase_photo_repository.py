"""Supabase-backed photo repository."""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from photo_archive.domain.photos import NewPhoto, PhotoRecord, PhotoStatus
from photo_archive.services.photos import PhotoRepository

_COLUMNS = (
    "id, contributor, date, floor_id, room_id, image_host_id, image_url, "
    "original_file_name, status, submitted_at, approved_at"
)

_logger = logging.getLogger(__name__)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo record persistence."""

    client: Client
    table_name: str = "photos"

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Insert a photo row and return the stored record."""
        response = (
            self.client.table(self.table_name)
            .insert(
                {
                    "contributor": photo.contributor,
                    "date": photo.date,
                    "floor_id": photo.floor_id,
                    "room_id": photo.room_id,
                    "image_host_id": photo.image_host_id,
                    "image_url": photo.image_url,
                    "original_file_name": photo.original_file_name,
                    "status": photo.status.value,
                    "submitted_at": photo.submitted_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo record")
        return _to_record(response.data[0])

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo row by id, if present."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def update_status(
        self,
        photo_id: UUID,
        expected: PhotoStatus,
        status: PhotoStatus,
        approved_at: datetime | None = None,
    ) -> PhotoRecord | None:
        """Conditionally update status, matching on the expected prior status."""
        payload: dict[str, object] = {"status": status.value}
        if approved_at is not None:
            payload["approved_at"] = approved_at.isoformat()
        response = (
            self.client.table(self.table_name)
            .update(payload)
            .eq("id", str(photo_id))
            .eq("status", expected.value)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def list_photos(
        self, status: PhotoStatus | None = None, floor_id: str | None = None
    ) -> list[PhotoRecord]:
        """Return photo rows ordered by submission time, newest first."""
        query = self.client.table(self.table_name).select(_COLUMNS)
        if status is not None:
            query = query.eq("status", status.value)
        if floor_id is not None:
            query = query.eq("floor_id", floor_id)
        response = query.order("submitted_at", desc=True).execute()
        return [_to_record(row) for row in response.data or []]

    def count_by_status(self) -> dict[PhotoStatus, int]:
        """Count rows per status."""
        response = self.client.table(self.table_name).select("status").execute()
        counts = dict.fromkeys(PhotoStatus, 0)
        for row in response.data or []:
            status = PhotoStatus(row["status"])
            counts[status] += 1
        return counts

    def ping(self) -> bool:
        """Run a trivial query to check connectivity."""
        try:
            self.client.table(self.table_name).select("id").limit(1).execute()
        except Exception:
            _logger.exception("Photo store ping failed")
            return False
        return True


def _to_record(row: dict[str, object]) -> PhotoRecord:
    return PhotoRecord(
        id=UUID(str(row["id"])),
        contributor=str(row["contributor"]),
        date=str(row["date"]),
        floor_id=str(row["floor_id"]),
        room_id=_optional_str(row.get("room_id")),
        image_host_id=str(row["image_host_id"]),
        image_url=str(row["image_url"]),
        original_file_name=_optional_str(row.get("original_file_name")),
        status=PhotoStatus(row["status"]),
        submitted_at=datetime.fromisoformat(str(row["submitted_at"])),
        approved_at=_parse_timestamp(row.get("approved_at")),
    )


def _optional_str(value: object) -> str | None:
    return str(value) if value else None


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
