"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_archive.adapters.cloudflare_images_client import (
    CloudflareImagesClient,
    ImageHost,
)
from photo_archive.adapters.supabase_photo_repository import SupabasePhotoRepository
from photo_archive.config import Settings
from photo_archive.services.moderation import ModerationService
from photo_archive.services.photos import PhotoRepository, PhotoService
from photo_archive.services.staging import StagingArea
from photo_archive.services.submissions import SubmissionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_repository: PhotoRepository
    image_host: ImageHost
    staging_area: StagingArea
    photo_service: PhotoService
    submission_service: SubmissionService
    moderation_service: ModerationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(
        supabase_client, table_name=resolved_settings.supabase_photos_table
    )
    image_host = CloudflareImagesClient.create(
        account_id=resolved_settings.cloudflare_account_id,
        api_token=resolved_settings.cloudflare_images_api_token,
        account_hash=resolved_settings.cloudflare_account_hash,
        timeout=resolved_settings.image_host_timeout_seconds,
    )
    staging_area = StagingArea(
        directory=resolved_settings.staging_dir,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    photo_service = PhotoService(photo_repository)
    submission_service = SubmissionService(
        repository=photo_repository,
        image_host=image_host,
        delivery_variant=resolved_settings.image_delivery_variant,
    )
    moderation_service = ModerationService(
        repository=photo_repository,
        image_host=image_host,
        allow_reject_approved=resolved_settings.allow_reject_approved,
    )

    async def close_resources() -> None:
        await image_host.close()

    return AppContainer(
        settings=resolved_settings,
        photo_repository=photo_repository,
        image_host=image_host,
        staging_area=staging_area,
        photo_service=photo_service,
        submission_service=submission_service,
        moderation_service=moderation_service,
        close_resources=close_resources,
    )
