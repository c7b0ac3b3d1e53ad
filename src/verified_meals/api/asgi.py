"""ASGI entrypoint for the verified meal planner API."""

from verified_meals.api.app import create_app
from verified_meals.containers import build_container

app = create_app(build_container())
