"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date

from macromate.domain.meals import Meal
from macromate.domain.nutrition import NutrientTotals


@dataclass(frozen=True)
class DailySummary:
    """A day's meals with totals compared against goals."""

    day: date
    meals: list[Meal]
    totals: NutrientTotals
    goals: NutrientTotals
    progress: dict[str, float]

    @property
    def is_empty(self) -> bool:
        """Return True when no meals were logged that day."""
        return not self.meals


@dataclass(frozen=True)
class TrendPoint:
    """Totals for one calendar day of a trend window."""

    date: date
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float


@dataclass(frozen=True)
class WeeklyTrends:
    """Seven chronologically ordered trend points and their daily averages."""

    points: list[TrendPoint]
    averages: NutrientTotals
