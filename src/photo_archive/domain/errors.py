"""Error types raised by the photo lifecycle services."""

from uuid import UUID

from photo_archive.domain.photos import PhotoStatus


class PhotoArchiveError(Exception):
    """Base class for photo archive failures."""


class InvalidInputError(PhotoArchiveError):
    """Submission data is missing or unacceptable."""


class PhotoNotFoundError(PhotoArchiveError):
    """No photo record exists for the given id."""

    def __init__(self, photo_id: UUID | str) -> None:
        super().__init__(f"Photo {photo_id} not found")
        self.photo_id = photo_id


class AlreadyInStateError(PhotoArchiveError):
    """The photo already has the requested status."""

    def __init__(self, photo_id: UUID, status: PhotoStatus) -> None:
        super().__init__(f"Photo {photo_id} is already {status.value}")
        self.photo_id = photo_id
        self.status = status


class InvalidTransitionError(PhotoArchiveError):
    """The requested status change is not allowed from the current status."""

    def __init__(
        self, photo_id: UUID, current: PhotoStatus, target: PhotoStatus
    ) -> None:
        super().__init__(
            f"Photo {photo_id} cannot move from {current.value} to {target.value}"
        )
        self.photo_id = photo_id
        self.current = current
        self.target = target


class UploadFailedError(PhotoArchiveError):
    """The image host rejected the upload or could not be reached."""


class PersistenceFailedError(PhotoArchiveError):
    """The record store failed to save a change."""


class CleanupFailedError(PhotoArchiveError):
    """A best-effort cleanup step failed. Logged, never raised to callers."""
