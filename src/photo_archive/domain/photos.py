"""Domain models for archive photo submissions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from uuid import UUID


class PhotoStatus(str, Enum):
    """Moderation status of a submitted photo."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class NewPhoto:
    """Payload for creating a photo record after a successful upload."""

    contributor: str
    date: str
    floor_id: str
    room_id: str | None
    image_host_id: str
    image_url: str
    original_file_name: str | None
    status: PhotoStatus
    submitted_at: datetime


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a persisted photo submission."""

    id: UUID
    contributor: str
    date: str
    floor_id: str
    room_id: str | None
    image_host_id: str
    image_url: str
    original_file_name: str | None
    status: PhotoStatus
    submitted_at: datetime
    approved_at: datetime | None = None


@dataclass(frozen=True)
class PhotoStats:
    """Photo counts per moderation status."""

    pending: int
    approved: int
    rejected: int

    @property
    def total(self) -> int:
        return self.pending + self.approved + self.rejected


@dataclass(frozen=True)
class StagedFile:
    """An uploaded file written to the local staging directory."""

    path: Path
    original_file_name: str | None
    content_type: str
    size_bytes: int


def format_archive_date(moment: datetime) -> str:
    """Format a timestamp as the archive's "Mon YYYY" date label."""
    return moment.strftime("%b %Y")
