"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from photo_archive.api.admin import API_VERSION, list_endpoints
from photo_archive.api.admin import router as admin_router
from photo_archive.api.photos import router as photos_router
from photo_archive.api.schemas import ErrorResponse
from photo_archive.app_logging import configure_logging
from photo_archive.containers import AppContainer
from photo_archive.domain.errors import (
    AlreadyInStateError,
    InvalidInputError,
    InvalidTransitionError,
    PersistenceFailedError,
    PhotoArchiveError,
    PhotoNotFoundError,
    UploadFailedError,
)

_ERROR_RESPONSES: dict[type[PhotoArchiveError], tuple[int, str]] = {
    InvalidInputError: (status.HTTP_400_BAD_REQUEST, "Invalid Input"),
    PhotoNotFoundError: (status.HTTP_404_NOT_FOUND, "Not Found"),
    AlreadyInStateError: (status.HTTP_409_CONFLICT, "Already In State"),
    InvalidTransitionError: (status.HTTP_409_CONFLICT, "Invalid Transition"),
    UploadFailedError: (status.HTTP_502_BAD_GATEWAY, "Upload Failed"),
    PersistenceFailedError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Persistence Failed",
    ),
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.environment)
    logger = logging.getLogger(__name__)
    logger.info("Environment: %s", container.settings.environment)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Photo Archive API", version=API_VERSION, lifespan=lifespan)
    app.state.container = container
    app.state.started_at = time.monotonic()

    app.include_router(photos_router)
    app.include_router(admin_router)

    @app.exception_handler(PhotoArchiveError)
    async def photo_archive_error(
        request: Request, exc: PhotoArchiveError
    ) -> JSONResponse:
        status_code, label = _error_response(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error_json(status_code, label, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = "; ".join(_describe_validation_error(e) for e in exc.errors())
        return _error_json(status.HTTP_400_BAD_REQUEST, "Invalid Input", message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = f"The requested resource '{request.url.path}' does not exist"
            return _error_json(exc.status_code, "Not Found", message)
        return _error_json(exc.status_code, "HTTP Error", str(exc.detail))

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Server error on %s %s", request.method, request.url.path)
        return _error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", str(exc)
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api")
    async def api_info() -> dict[str, object]:
        """Describe the API and its endpoints."""
        return {
            "message": "Photo Archive API",
            "version": API_VERSION,
            "endpoints": sorted({e["path"] for e in list_endpoints(app)}),
        }

    return app


def _error_response(exc: PhotoArchiveError) -> tuple[int, str]:
    for error_type, response in _ERROR_RESPONSES.items():
        if isinstance(exc, error_type):
            return response
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error"


def _describe_validation_error(error: dict[str, Any]) -> str:
    message = str(error.get("msg", "invalid value"))
    location = error.get("loc") or ()
    if not location:
        return message
    return f"{location[-1]}: {message}"


def _error_json(status_code: int, label: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=label, message=message)
    return JSONResponse(body.model_dump(), status_code=status_code)
