"""ASGI entrypoint for the gateway."""

from barn_gateway.api.app import create_app
from barn_gateway.containers import build_container

app = create_app(build_container())
