"""Weekly trend endpoint."""

from datetime import date

from fastapi import APIRouter, Depends, Request

from macromate.api.dependencies import get_container, require_auth
from macromate.api.schemas import WeeklyTrendsResponse
from macromate.services.auth import AuthContext

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/weekly")
def weekly_trends(
    request: Request,
    anchor: date | None = None,
    auth: AuthContext = Depends(require_auth),
) -> WeeklyTrendsResponse:
    """Return seven daily points ending at `anchor` (today by default)."""
    container = get_container(request)
    trends = container.stats_service.get_weekly_trends(
        auth.user_id,
        anchor=anchor,
        timezone_name=container.settings.default_timezone,
    )
    return WeeklyTrendsResponse.from_trends(trends)
