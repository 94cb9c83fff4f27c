"""ASGI entrypoint for the pantry sync API."""

from pantry_sync.api.app import create_app
from pantry_sync.containers import build_container

app = create_app(build_container())
