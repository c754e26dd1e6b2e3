"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    supabase_photos_table: str = "photos"
    cloudflare_account_id: str
    cloudflare_images_api_token: str
    cloudflare_account_hash: str
    image_delivery_variant: str = "public"
    image_host_timeout_seconds: float = 30.0
    staging_dir: Path = Path("uploads/temp")
    max_upload_bytes: int = 50 * 1024 * 1024
    allow_reject_approved: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
