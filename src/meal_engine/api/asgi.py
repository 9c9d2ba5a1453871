"""ASGI entrypoint for the meal subscription engine API."""

from meal_engine.api.app import create_app
from meal_engine.containers import build_container

app = create_app(build_container())
