"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from macromate.errors import AuthenticationError
from macromate.services.auth import AuthContext

if TYPE_CHECKING:
    from macromate.containers import AppContainer

_bearer = HTTPBearer(auto_error=False)


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AuthContext:
    """Resolve the bearer token into the caller's auth context."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not signed in.")
    container = get_container(request)
    return container.auth_service.resolve(credentials.credentials)
