"""ASGI entrypoint for the world capture API."""

from world_capture.api.app import create_app
from world_capture.containers import build_container

app = create_app(build_container())
