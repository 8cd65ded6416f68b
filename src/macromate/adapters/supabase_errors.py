"""Translate Supabase client failures into persistence errors."""

import logging
from typing import Any, Protocol

import httpx
from supabase import PostgrestAPIError

from macromate.errors import PersistenceError

_logger = logging.getLogger(__name__)


class _Executable(Protocol):
    def execute(self) -> Any: ...


def execute(query: _Executable, operation: str) -> Any:
    """Run a query builder, raising PersistenceError on API or network failure."""
    try:
        return query.execute()
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        _logger.error("Supabase %s failed: %s", operation, exc)
        raise PersistenceError(
            "The database request failed. Please try again.", operation=operation
        ) from exc
