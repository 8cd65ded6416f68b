"""Models for structured model outputs."""

from pydantic import BaseModel, Field

from macromate.domain.nutrition import NutrientTotals


class FoodIdentification(BaseModel):
    """Structured output for food identification from a photo."""

    food_items: list[str]


class MacroEstimate(BaseModel):
    """Structured output for a single food's nutrients."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float = Field(ge=0.0)

    def to_totals(self) -> NutrientTotals:
        """Convert the estimate into a nutrient record."""
        return NutrientTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
        )
