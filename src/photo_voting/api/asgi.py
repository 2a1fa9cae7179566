"""ASGI entrypoint for the photo voting API."""

from photo_voting.api.app import create_app
from photo_voting.containers import build_container

app = create_app(build_container())
