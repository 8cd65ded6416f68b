"""ASGI entrypoint for the MacroMate API."""

from macromate.api.app import create_app
from macromate.containers import build_container

app = create_app(build_container())
