"""Request and response models for the HTTP API."""

import base64
import binascii
from datetime import date, datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

from macromate.domain.identification import IdentifiedFood, LookupStatus
from macromate.domain.meals import (
    DEFAULT_SERVING_SIZE,
    FoodItem,
    Meal,
    MealCategory,
    MealDraft,
)
from macromate.domain.models import AuthSession, UserProfile, WeightEntry
from macromate.domain.nutrition import NutrientTotals
from macromate.domain.stats import DailySummary, WeeklyTrends


class Nutrients(BaseModel):
    """Calories (kcal) and macros (g)."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float = Field(ge=0.0)

    @classmethod
    def from_totals(cls, totals: NutrientTotals) -> "Nutrients":
        """Build from a nutrient record."""
        return cls(**totals.to_dict())

    def to_totals(self) -> NutrientTotals:
        """Convert to a nutrient record."""
        return NutrientTotals.from_mapping(self.model_dump())


class SignUpRequest(BaseModel):
    """Account creation form."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]
    username: str = Field(min_length=3, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    """Sign-in form."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Tokens for a signed-in user."""

    access_token: str
    refresh_token: str | None
    token_type: str = "bearer"
    user_id: UUID

    @classmethod
    def from_session(cls, session: AuthSession) -> "TokenResponse":
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            user_id=session.user.id,
        )


class ProfileResponse(BaseModel):
    id: UUID
    email: str | None
    display_name: str | None
    photo_url: str | None
    height: float | None
    weight: float | None
    goals: Nutrients

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            email=profile.email,
            display_name=profile.display_name,
            photo_url=profile.photo_url,
            height=profile.height,
            weight=profile.weight,
            goals=Nutrients.from_totals(profile.goals),
        )


class ProfileUpdateRequest(BaseModel):
    display_name: str
    height: float | None = None
    weight: float | None = None


class GoalsRequest(BaseModel):
    """Daily goals; every value must be at least 1."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float

    def to_totals(self) -> NutrientTotals:
        return NutrientTotals(**self.model_dump())


class WeightRequest(BaseModel):
    weight: float
    day: date | None = None


class WeightEntryResponse(BaseModel):
    date: date
    weight: float

    @classmethod
    def from_entry(cls, entry: WeightEntry) -> "WeightEntryResponse":
        return cls(date=entry.date, weight=entry.weight)


class FoodItemPayload(Nutrients):
    """A food item as sent or returned by the API."""

    id: str | None = None
    name: str
    serving_size: str = DEFAULT_SERVING_SIZE

    @classmethod
    def from_item(cls, item: FoodItem) -> "FoodItemPayload":
        return cls(
            id=item.id,
            name=item.name,
            serving_size=item.serving_size,
            **item.nutrients.to_dict(),
        )

    def to_item(self) -> FoodItem:
        """Convert to a domain food item, keeping a supplied id."""
        return FoodItem.from_nutrients(
            name=self.name,
            nutrients=self.to_totals(),
            serving_size=self.serving_size or DEFAULT_SERVING_SIZE,
            item_id=self.id,
        )


def _strip_base64(value: str) -> str:
    # Accept data URLs as well as bare base64.
    payload = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("must be valid base64") from exc
    return payload


Base64Data = Annotated[str, AfterValidator(_strip_base64)]


class MealCreateRequest(BaseModel):
    date: date
    name: str = ""
    category: MealCategory = MealCategory.SNACKS
    food_items: list[FoodItemPayload]
    photo_base64: Base64Data | None = None

    def to_draft(self) -> MealDraft:
        return MealDraft(
            date=self.date,
            food_items=[item.to_item() for item in self.food_items],
            name=self.name,
            category=self.category,
        )

    def photo_bytes(self) -> bytes | None:
        """Return the decoded photo, if one was sent."""
        if not self.photo_base64:
            return None
        return base64.b64decode(self.photo_base64)


class MealUpdateRequest(BaseModel):
    """Replacement food list; omitting `name` keeps the stored name."""

    food_items: list[FoodItemPayload]
    name: str | None = None


class MealResponse(BaseModel):
    id: UUID
    date: date
    name: str
    category: MealCategory
    food_items: list[FoodItemPayload]
    totals: Nutrients
    created_at: datetime
    photo_url: str | None

    @classmethod
    def from_meal(cls, meal: Meal) -> "MealResponse":
        return cls(
            id=meal.id,
            date=meal.date,
            name=meal.name,
            category=meal.category,
            food_items=[FoodItemPayload.from_item(item) for item in meal.food_items],
            totals=Nutrients.from_totals(meal.totals),
            created_at=meal.created_at,
            photo_url=meal.photo.url if meal.photo else None,
        )


class DailySummaryResponse(BaseModel):
    date: date
    meals: list[MealResponse]
    totals: Nutrients
    goals: Nutrients
    progress: dict[str, float]

    @classmethod
    def from_summary(cls, summary: DailySummary) -> "DailySummaryResponse":
        return cls(
            date=summary.day,
            meals=[MealResponse.from_meal(meal) for meal in summary.meals],
            totals=Nutrients.from_totals(summary.totals),
            goals=Nutrients.from_totals(summary.goals),
            progress=summary.progress,
        )


class TrendPointResponse(Nutrients):
    date: date


class WeeklyTrendsResponse(BaseModel):
    points: list[TrendPointResponse]
    averages: Nutrients

    @classmethod
    def from_trends(cls, trends: WeeklyTrends) -> "WeeklyTrendsResponse":
        return cls(
            points=[
                TrendPointResponse(
                    date=point.date,
                    calories=point.calories,
                    protein=point.protein,
                    carbs=point.carbs,
                    fat=point.fat,
                    fiber=point.fiber,
                )
                for point in trends.points
            ],
            averages=Nutrients.from_totals(trends.averages),
        )


class LookupRequest(BaseModel):
    food_name: str = Field(min_length=1)
    serving_size: str = DEFAULT_SERVING_SIZE


class IdentifyRequest(BaseModel):
    image_base64: Base64Data
    serving_size: str = DEFAULT_SERVING_SIZE

    def image_bytes(self) -> bytes:
        return base64.b64decode(self.image_base64)


class IdentifiedFoodResponse(BaseModel):
    name: str
    status: LookupStatus
    serving_size: str
    nutrients: Nutrients | None
    error: str | None

    @classmethod
    def from_food(cls, food: IdentifiedFood) -> "IdentifiedFoodResponse":
        return cls(
            name=food.name,
            status=food.status,
            serving_size=food.serving_size,
            nutrients=(
                Nutrients.from_totals(food.nutrients) if food.nutrients else None
            ),
            error=food.error,
        )


class IdentifyResponse(BaseModel):
    items: list[IdentifiedFoodResponse]
    can_save: bool
