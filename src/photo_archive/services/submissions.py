"""Upload coordination for new photo submissions."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from photo_archive.adapters.cloudflare_images_client import DEFAULT_VARIANT, ImageHost
from photo_archive.domain.errors import (
    InvalidInputError,
    PersistenceFailedError,
    UploadFailedError,
)
from photo_archive.domain.photos import (
    NewPhoto,
    PhotoRecord,
    PhotoStatus,
    format_archive_date,
)
from photo_archive.services.cleanup import remove_staged_file
from photo_archive.services.photos import PhotoRepository

_logger = logging.getLogger(__name__)


@dataclass
class SubmissionService:
    """Turns a staged upload into a pending photo record.

    The staged file is always released when ``submit`` returns or raises. A
    record is only written after the image host has accepted the file.
    """

    repository: PhotoRepository
    image_host: ImageHost
    delivery_variant: str = DEFAULT_VARIANT

    async def submit(  # noqa: PLR0913
        self,
        staged_file_path: Path,
        contributor: str,
        floor_id: str,
        room_id: str | None = None,
        original_file_name: str | None = None,
    ) -> PhotoRecord:
        """Upload a staged file and persist its pending photo record."""
        try:
            return await self._submit(
                staged_file_path,
                contributor,
                floor_id,
                room_id,
                original_file_name,
            )
        finally:
            await remove_staged_file(staged_file_path)

    def supported_formats(self) -> list[str]:
        """Return the file extensions accepted for upload."""
        return self.image_host.supported_formats()

    async def _submit(  # noqa: PLR0913
        self,
        staged_file_path: Path,
        contributor: str,
        floor_id: str,
        room_id: str | None,
        original_file_name: str | None,
    ) -> PhotoRecord:
        contributor = (contributor or "").strip()
        floor_id = (floor_id or "").strip()
        room_id = (room_id or "").strip() or None
        if not contributor or not floor_id:
            raise InvalidInputError("Please provide contributor name and floor ID")
        self._validate_file(staged_file_path, original_file_name)

        now = datetime.now(tz=UTC)
        date = format_archive_date(now)
        metadata = {
            "contributor": contributor,
            "floorId": floor_id,
            "roomId": room_id or "",
            "date": date,
        }

        try:
            result = await self.image_host.store(staged_file_path, metadata)
        except Exception as exc:
            _logger.exception(
                "Image host upload failed",
                extra={"staged_path": str(staged_file_path)},
            )
            raise UploadFailedError(f"Failed to upload image: {exc}") from exc
        if not result.success or not result.id:
            details = "; ".join(result.errors) or "no image id returned"
            _logger.error("Image host rejected upload: %s", details)
            raise UploadFailedError(f"Image host rejected the upload: {details}")

        photo = NewPhoto(
            contributor=contributor,
            date=date,
            floor_id=floor_id,
            room_id=room_id,
            image_host_id=result.id,
            image_url=self.image_host.delivery_url(result.id, self.delivery_variant),
            original_file_name=original_file_name,
            status=PhotoStatus.PENDING,
            submitted_at=now,
        )
        try:
            record = self.repository.create_photo(photo)
        except Exception as exc:
            # The uploaded image stays on the host; reconcile by image id.
            _logger.exception(
                "Failed to persist photo record after upload",
                extra={"image_host_id": result.id},
            )
            raise PersistenceFailedError(
                f"Image {result.id} was uploaded but its record could not be saved"
            ) from exc

        _logger.info(
            "Photo submitted",
            extra={"photo_id": str(record.id), "image_host_id": record.image_host_id},
        )
        return record

    def _validate_file(self, path: Path, original_file_name: str | None) -> None:
        name = original_file_name or path.name
        extension = Path(name).suffix.lower().lstrip(".")
        supported = self.image_host.supported_formats()
        if extension not in supported:
            raise InvalidInputError(
                f"Unsupported image format '{extension or name}'. "
                f"Supported formats: {', '.join(supported)}"
            )
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise InvalidInputError("Uploaded file is not readable") from exc
        if size > self.image_host.max_file_bytes:
            raise InvalidInputError(
                f"Image exceeds the {self.image_host.max_file_bytes} byte size limit"
            )
