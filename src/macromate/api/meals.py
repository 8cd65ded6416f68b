"""Meal logging endpoints."""

from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query, Request, Response, status

from macromate.api.dependencies import get_container, require_auth
from macromate.api.schemas import (
    DailySummaryResponse,
    MealCreateRequest,
    MealResponse,
    MealUpdateRequest,
)
from macromate.services.auth import AuthContext

router = APIRouter(prefix="/meals", tags=["meals"])


@router.get("")
def daily_summary(
    request: Request,
    day: date | None = Query(default=None, alias="date"),
    auth: AuthContext = Depends(require_auth),
) -> DailySummaryResponse:
    """Return the meals and totals for a day, today by default."""
    container = get_container(request)
    if day is None:
        timezone = ZoneInfo(container.settings.default_timezone)
        day = datetime.now(tz=timezone).date()
    summary = container.stats_service.get_daily(auth.user_id, day)
    return DailySummaryResponse.from_summary(summary)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal(
    payload: MealCreateRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> MealResponse:
    """Log a meal, optionally with a photo."""
    meal = get_container(request).meal_service.save_meal(
        auth.user_id, payload.to_draft(), photo=payload.photo_bytes()
    )
    return MealResponse.from_meal(meal)


@router.get("/{meal_id}")
def get_meal(
    meal_id: UUID, request: Request, auth: AuthContext = Depends(require_auth)
) -> MealResponse:
    meal = get_container(request).meal_service.get_meal(auth.user_id, meal_id)
    return MealResponse.from_meal(meal)


@router.put("/{meal_id}")
def update_meal(
    meal_id: UUID,
    payload: MealUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> MealResponse:
    """Replace a meal's food items and recompute its totals."""
    meal = get_container(request).meal_service.update_meal(
        auth.user_id,
        meal_id,
        [item.to_item() for item in payload.food_items],
        name=payload.name,
    )
    return MealResponse.from_meal(meal)


@router.delete("/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meal(
    meal_id: UUID, request: Request, auth: AuthContext = Depends(require_auth)
) -> Response:
    """Delete a meal and its photo."""
    get_container(request).meal_service.delete_meal(auth.user_id, meal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
