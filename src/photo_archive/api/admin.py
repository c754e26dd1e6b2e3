"""Operator endpoints for health, diagnostics and the moderation queue."""

from __future__ import annotations

import platform
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from photo_archive.api.schemas import PhotoResponse, StatsResponse

if TYPE_CHECKING:
    from fastapi import FastAPI

    from photo_archive.containers import AppContainer

API_VERSION = "1.0"

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/healthcheck")
async def healthcheck(request: Request) -> JSONResponse:
    """Report service health, including record store connectivity."""
    container: AppContainer = request.app.state.container
    connected = container.photo_repository.ping()
    payload: dict[str, object] = {
        "uptime": time.monotonic() - request.app.state.started_at,
        "timestamp": int(time.time() * 1000),
        "environment": container.settings.environment,
        "databaseConnected": connected,
        "apiVersion": API_VERSION,
        "serverTime": datetime.now(tz=UTC).isoformat(),
    }
    if not connected:
        payload["status"] = "Service Unavailable"
        payload["message"] = "Database connection is not established"
        return JSONResponse(payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    payload["status"] = "OK"
    payload["message"] = "Service is healthy"
    return JSONResponse(payload)


@router.get("/debug")
async def debug(request: Request) -> dict[str, object]:
    """Return runtime details and the list of registered endpoints."""
    container: AppContainer = request.app.state.container
    return {
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "environment": container.settings.environment,
        "databaseConnected": container.photo_repository.ping(),
        "apiEndpoints": list_endpoints(request.app),
        "pythonVersion": platform.python_version(),
    }


@router.get(
    "/photos/pending",
    response_model=list[PhotoResponse],
    response_model_by_alias=True,
)
async def pending_photos(request: Request) -> list[PhotoResponse]:
    """Return photos awaiting moderation, newest first."""
    container: AppContainer = request.app.state.container
    photos = container.moderation_service.list_pending()
    return [PhotoResponse.from_record(photo) for photo in photos]


@router.get("/photos/stats")
async def photo_stats(request: Request) -> StatsResponse:
    """Return photo counts per status."""
    container: AppContainer = request.app.state.container
    return StatsResponse.from_stats(container.moderation_service.stats())


def list_endpoints(app: FastAPI) -> list[dict[str, str]]:
    """Describe API routes as method, path and summary.

    Read from the OpenAPI schema so included routers are listed however
    FastAPI lays out `app.routes`.
    """
    endpoints = []
    for path, operations in app.openapi()["paths"].items():
        for method, operation in sorted(operations.items()):
            text = operation.get("description") or operation.get("summary", "")
            summary = next(iter(text.strip().splitlines()), "")
            endpoints.append(
                {"method": method.upper(), "path": path, "description": summary}
            )
    return endpoints
