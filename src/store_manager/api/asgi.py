"""ASGI entrypoint for the store manager API."""

from store_manager.api.app import create_app
from store_manager.containers import build_container

app = create_app(build_container())
