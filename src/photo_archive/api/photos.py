"""Photo submission, moderation and listing endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, File, Form, Query, Request, UploadFile, status

from photo_archive.api.schemas import PhotoMessage, PhotoResponse
from photo_archive.domain.errors import InvalidInputError, PhotoNotFoundError
from photo_archive.domain.photos import PhotoStatus  # noqa: TC001

if TYPE_CHECKING:
    from photo_archive.containers import AppContainer

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.get("", response_model=list[PhotoResponse], response_model_by_alias=True)
async def list_photos(
    request: Request,
    photo_status: PhotoStatus | None = Query(default=None, alias="status"),
    floor_id: str | None = Query(default=None, alias="floorId"),
) -> list[PhotoResponse]:
    """Return photos filtered by status and floor, newest first."""
    container: AppContainer = request.app.state.container
    photos = container.photo_service.list_photos(status=photo_status, floor_id=floor_id)
    return [PhotoResponse.from_record(photo) for photo in photos]


@router.get("/formats")
async def supported_formats(request: Request) -> dict[str, list[str]]:
    """Return the image formats accepted for upload."""
    container: AppContainer = request.app.state.container
    return {"formats": container.submission_service.supported_formats()}


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=PhotoMessage,
    response_model_by_alias=True,
)
async def upload_photo(
    request: Request,
    image_file: UploadFile | None = File(default=None, alias="imageFile"),
    contributor: str = Form(default=""),
    floor_id: str = Form(default="", alias="floorId"),
    room_id: str | None = Form(default=None, alias="roomId"),
) -> PhotoMessage:
    """Stage an uploaded image and submit it for moderation."""
    container: AppContainer = request.app.state.container
    if image_file is None or not image_file.filename:
        raise InvalidInputError("No file uploaded")
    staged = container.staging_area.stage(
        image_file.file,
        original_file_name=image_file.filename,
        content_type=image_file.content_type,
    )
    photo = await container.submission_service.submit(
        staged.path,
        contributor=contributor,
        floor_id=floor_id,
        room_id=room_id,
        original_file_name=staged.original_file_name,
    )
    return PhotoMessage(
        message="Photo uploaded and pending approval",
        photo=PhotoResponse.from_record(photo),
    )


@router.put(
    "/{photo_id}/approve", response_model=PhotoMessage, response_model_by_alias=True
)
async def approve_photo(photo_id: str, request: Request) -> PhotoMessage:
    """Approve a pending photo."""
    container: AppContainer = request.app.state.container
    photo = container.moderation_service.approve(_parse_photo_id(photo_id))
    return PhotoMessage(
        message="Photo approved successfully", photo=PhotoResponse.from_record(photo)
    )


@router.put(
    "/{photo_id}/reject", response_model=PhotoMessage, response_model_by_alias=True
)
async def reject_photo(photo_id: str, request: Request) -> PhotoMessage:
    """Reject a photo and remove its hosted image."""
    container: AppContainer = request.app.state.container
    photo = await container.moderation_service.reject(_parse_photo_id(photo_id))
    return PhotoMessage(
        message="Photo rejected successfully", photo=PhotoResponse.from_record(photo)
    )


def _parse_photo_id(photo_id: str) -> UUID:
    # An id that is not a UUID cannot name any record.
    try:
        return UUID(photo_id)
    except ValueError as exc:
        raise PhotoNotFoundError(photo_id) from exc
