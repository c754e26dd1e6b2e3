"""ASGI entrypoint for the photo archive API."""

from photo_archive.api.app import create_app
from photo_archive.containers import build_container

app = create_app(build_container())
