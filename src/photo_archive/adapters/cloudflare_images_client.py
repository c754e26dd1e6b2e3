"""Cloudflare Images client used as the archive's image host."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx
from pydantic import BaseModel

SUPPORTED_FORMATS = ("jpg", "jpeg", "png", "gif", "webp", "svg")
MAX_FILE_BYTES = 10 * 1024 * 1024
DEFAULT_VARIANT = "public"

_API_BASE_URL = "https://api.cloudflare.com/client/v4"
_DELIVERY_BASE_URL = "https://imagedelivery.net"


class ImageUploadResult(BaseModel):
    """Outcome of storing an image on the host."""

    success: bool
    id: str | None = None
    errors: list[str] = []


class ImageHost(Protocol):
    """Interface for the external image host."""

    max_file_bytes: int

    async def store(
        self, file_path: Path, metadata: dict[str, str]
    ) -> ImageUploadResult:
        """Upload a local file with metadata and return the host result."""

    async def delete(self, image_id: str) -> None:
        """Delete an image from the host, raising on failure."""

    def delivery_url(self, image_id: str, variant: str = DEFAULT_VARIANT) -> str:
        """Return the public delivery URL for an image."""

    def supported_formats(self) -> list[str]:
        """Return file extensions the host accepts."""


class _EnvelopeMessage(BaseModel):
    code: int | None = None
    message: str = ""


class _Envelope(BaseModel):
    success: bool = False
    result: dict[str, object] | None = None
    errors: list[_EnvelopeMessage] = []


@dataclass
class CloudflareImagesClient(ImageHost):
    """Image host backed by the Cloudflare Images API."""

    account_id: str
    api_token: str
    account_hash: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0
    max_file_bytes: int = MAX_FILE_BYTES

    @classmethod
    def create(
        cls,
        account_id: str,
        api_token: str,
        account_hash: str,
        timeout: float = 30.0,
    ) -> "CloudflareImagesClient":
        """Create a Cloudflare Images client with a managed httpx session."""
        return cls(
            account_id=account_id,
            api_token=api_token,
            account_hash=account_hash,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    @property
    def _images_url(self) -> str:
        return f"{_API_BASE_URL}/accounts/{self.account_id}/images/v1"

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_token}"}

    async def store(
        self, file_path: Path, metadata: dict[str, str]
    ) -> ImageUploadResult:
        """Upload an image file via multipart form data."""
        with file_path.open("rb") as handle:
            response = await self.http_client.post(
                self._images_url,
                headers=self._headers,
                files={"file": (file_path.name, handle)},
                data={"metadata": json.dumps(metadata)},
                timeout=self.timeout,
            )
        envelope = _parse_envelope(response)
        image_id = envelope.result.get("id") if envelope.result else None
        return ImageUploadResult(
            success=envelope.success and isinstance(image_id, str),
            id=image_id if isinstance(image_id, str) else None,
            errors=[error.message for error in envelope.errors],
        )

    async def delete(self, image_id: str) -> None:
        """Delete an image by its Cloudflare id."""
        response = await self.http_client.delete(
            f"{self._images_url}/{image_id}",
            headers=self._headers,
            timeout=self.timeout,
        )
        envelope = _parse_envelope(response)
        if not envelope.success:
            messages = ", ".join(error.message for error in envelope.errors)
            raise RuntimeError(f"Cloudflare image delete failed: {messages}")

    def delivery_url(self, image_id: str, variant: str = DEFAULT_VARIANT) -> str:
        """Build the imagedelivery.net URL for an image variant."""
        return f"{_DELIVERY_BASE_URL}/{self.account_hash}/{image_id}/{variant}"

    def supported_formats(self) -> list[str]:
        """Return the accepted file extensions."""
        return list(SUPPORTED_FORMATS)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _parse_envelope(response: httpx.Response) -> _Envelope:
    """Parse the Cloudflare API envelope, falling back to the HTTP status."""
    try:
        payload = response.json()
    except ValueError:
        response.raise_for_status()
        raise
    if not isinstance(payload, dict):
        response.raise_for_status()
        raise RuntimeError("Unexpected Cloudflare response payload")
    return _Envelope.model_validate(payload)
