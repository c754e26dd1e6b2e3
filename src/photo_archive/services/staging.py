"""Local staging of uploaded files before they are pushed to the image host."""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from photo_archive.domain.errors import InvalidInputError
from photo_archive.domain.photos import StagedFile

_logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
_CHUNK_SIZE = 1024 * 1024


@dataclass
class StagingArea:
    """Writes incoming uploads under unique names in a shared directory."""

    directory: Path
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def stage(
        self,
        source: BinaryIO,
        original_file_name: str | None,
        content_type: str | None,
    ) -> StagedFile:
        """Copy an upload stream to disk and return the staged file."""
        if not content_type or not content_type.startswith("image/"):
            raise InvalidInputError("Only image files are allowed!")

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / _unique_name(original_file_name)
        size = 0
        try:
            with path.open("wb") as target:
                while chunk := source.read(_CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_upload_bytes:
                        raise InvalidInputError(
                            f"File exceeds the {self.max_upload_bytes} byte upload limit"
                        )
                    target.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        _logger.info(
            "Staged upload",
            extra={"staged_path": str(path), "size_bytes": size},
        )
        return StagedFile(
            path=path,
            original_file_name=original_file_name,
            content_type=content_type,
            size_bytes=size,
        )


def _unique_name(original_file_name: str | None) -> str:
    """Build a collision-free name: epoch millis, random suffix, original extension."""
    suffix = Path(original_file_name).suffix.lower() if original_file_name else ""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"
