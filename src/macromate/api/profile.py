"""Profile, goals and weight history endpoints."""

from fastapi import APIRouter, Depends, Request, status

from macromate.api.dependencies import get_container, require_auth
from macromate.api.schemas import (
    GoalsRequest,
    Nutrients,
    ProfileResponse,
    ProfileUpdateRequest,
    WeightEntryResponse,
    WeightRequest,
)
from macromate.services.auth import AuthContext

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
def get_profile(auth: AuthContext = Depends(require_auth)) -> ProfileResponse:
    """Return the caller's profile."""
    return ProfileResponse.from_profile(auth.profile)


@router.patch("")
def update_profile(
    payload: ProfileUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> ProfileResponse:
    """Update name and body measurements."""
    user_service = get_container(request).user_service
    user_service.update_profile(
        auth.user_id,
        display_name=payload.display_name,
        height=payload.height,
        weight=payload.weight,
    )
    profile = user_service.get_profile(auth.user_id) or auth.profile
    return ProfileResponse.from_profile(profile)


@router.put("/goals")
def update_goals(
    payload: GoalsRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> Nutrients:
    """Replace the caller's daily goals."""
    goals = get_container(request).user_service.update_goals(
        auth.user_id, payload.to_totals()
    )
    return Nutrients.from_totals(goals)


@router.get("/weight")
def weight_history(
    request: Request, auth: AuthContext = Depends(require_auth)
) -> list[WeightEntryResponse]:
    entries = get_container(request).user_service.get_weight_history(auth.user_id)
    return [WeightEntryResponse.from_entry(entry) for entry in entries]


@router.post("/weight", status_code=status.HTTP_201_CREATED)
def add_weight(
    payload: WeightRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> WeightEntryResponse:
    """Record a weigh-in for today or the given day."""
    entry = get_container(request).user_service.add_weight_entry(
        auth.user_id, payload.weight, day=payload.day
    )
    return WeightEntryResponse.from_entry(entry)
