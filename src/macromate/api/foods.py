"""Nutrient lookup and photo identification endpoints."""

from fastapi import APIRouter, Depends, Request

from macromate.api.dependencies import get_container, require_auth
from macromate.api.schemas import (
    IdentifiedFoodResponse,
    IdentifyRequest,
    IdentifyResponse,
    LookupRequest,
    Nutrients,
)
from macromate.domain.identification import LookupStatus

router = APIRouter(
    prefix="/foods", tags=["foods"], dependencies=[Depends(require_auth)]
)


@router.post("/lookup")
async def lookup_food(payload: LookupRequest, request: Request) -> Nutrients:
    """Estimate nutrients for one food and serving size."""
    totals = await get_container(request).lookup_service.lookup(
        payload.food_name.strip(), payload.serving_size
    )
    return Nutrients.from_totals(totals)


@router.post("/identify")
async def identify_foods(
    payload: IdentifyRequest, request: Request
) -> IdentifyResponse:
    """Identify the foods in a photo and look up each one concurrently.

    Items whose lookup failed or timed out are returned with an error status;
    the rest still carry their nutrients.
    """
    items = await get_container(request).identification_service.identify_meal(
        payload.image_bytes(), payload.serving_size
    )
    return IdentifyResponse(
        items=[IdentifiedFoodResponse.from_food(item) for item in items],
        can_save=any(item.status is LookupStatus.LOADED for item in items),
    )
