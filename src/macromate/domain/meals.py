"""Domain models for meal logging."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4

from macromate.domain.nutrition import NutrientTotals

DEFAULT_SERVING_SIZE = "1 serving"
DEFAULT_MEAL_NAME = "Manual Meal"
DEFAULT_EDITED_MEAL_NAME = "Edited Meal"


class MealCategory(StrEnum):
    """Fixed set of meal categories."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


@dataclass(frozen=True)
class FoodItem:
    """A single food within a meal, with nutrients for its serving."""

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    serving_size: str = DEFAULT_SERVING_SIZE
    id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def from_nutrients(
        cls,
        name: str,
        nutrients: NutrientTotals,
        serving_size: str = DEFAULT_SERVING_SIZE,
        item_id: str | None = None,
    ) -> "FoodItem":
        """Build a food item from a nutrient record."""
        return cls(
            name=name,
            calories=nutrients.calories,
            protein=nutrients.protein,
            carbs=nutrients.carbs,
            fat=nutrients.fat,
            fiber=nutrients.fiber,
            serving_size=serving_size,
            id=item_id or str(uuid4()),
        )

    @property
    def nutrients(self) -> NutrientTotals:
        """Return this item's nutrients as a record."""
        return NutrientTotals.of(self)


@dataclass(frozen=True)
class MealPhoto:
    """Reference to a meal photo in object storage."""

    url: str
    path: str


@dataclass(frozen=True)
class MealDraft:
    """A meal as entered by the user, before it is persisted."""

    date: date
    food_items: list[FoodItem]
    name: str = ""
    category: MealCategory = MealCategory.SNACKS


@dataclass(frozen=True)
class Meal:
    """A persisted meal. `totals` always equals the sum of `food_items`."""

    id: UUID
    user_id: UUID
    date: date
    name: str
    category: MealCategory
    food_items: list[FoodItem]
    totals: NutrientTotals
    created_at: datetime
    photo: MealPhoto | None = None
