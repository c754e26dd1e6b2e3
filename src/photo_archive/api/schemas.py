"""Pydantic response models for the photo API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from photo_archive.domain.photos import PhotoRecord, PhotoStats, PhotoStatus


class PhotoResponse(BaseModel):
    """Photo record as returned to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: UUID
    contributor: str
    date: str
    floor_id: str
    room_id: str | None = None
    image_host_id: str
    image_url: str
    original_file_name: str | None = None
    status: PhotoStatus
    submitted_at: datetime
    approved_at: datetime | None = None

    @classmethod
    def from_record(cls, record: PhotoRecord) -> "PhotoResponse":
        return cls(
            id=record.id,
            contributor=record.contributor,
            date=record.date,
            floor_id=record.floor_id,
            room_id=record.room_id,
            image_host_id=record.image_host_id,
            image_url=record.image_url,
            original_file_name=record.original_file_name,
            status=record.status,
            submitted_at=record.submitted_at,
            approved_at=record.approved_at,
        )


class PhotoMessage(BaseModel):
    """A photo together with a human-readable outcome message."""

    message: str
    photo: PhotoResponse


class StatsResponse(BaseModel):
    """Photo counts per moderation status."""

    pending: int
    approved: int
    rejected: int
    total: int

    @classmethod
    def from_stats(cls, stats: PhotoStats) -> "StatsResponse":
        return cls(
            pending=stats.pending,
            approved=stats.approved,
            rejected=stats.rejected,
            total=stats.total,
        )


class ErrorResponse(BaseModel):
    """Error payload shared by all endpoints."""

    error: str
    message: str
