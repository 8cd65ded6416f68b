"""Nutrient records and the totals reducer."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from macromate.errors import InvalidNutrientsError

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat", "fiber")


class HasNutrients(Protocol):
    """Anything exposing the five tracked nutrient fields."""

    @property
    def calories(self) -> float: ...

    @property
    def protein(self) -> float: ...

    @property
    def carbs(self) -> float: ...

    @property
    def fat(self) -> float: ...

    @property
    def fiber(self) -> float: ...


@dataclass(frozen=True)
class NutrientTotals:
    """Calories in kcal; protein, carbs, fat and fiber in grams."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

    @classmethod
    def zero(cls) -> "NutrientTotals":
        """Return an all-zero record."""
        return cls()

    @classmethod
    def of(cls, source: HasNutrients) -> "NutrientTotals":
        """Copy the nutrient fields of any record exposing them."""
        return cls(
            calories=source.calories,
            protein=source.protein,
            carbs=source.carbs,
            fat=source.fat,
            fiber=source.fiber,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "NutrientTotals":
        """Build a record from untrusted data, rejecting malformed fields."""
        values: dict[str, float] = {}
        for name in NUTRIENT_FIELDS:
            values[name] = _validated_amount(name, raw.get(name))
        return cls(**values)

    def plus(self, other: HasNutrients) -> "NutrientTotals":
        """Return the field-wise sum of this record and another."""
        return NutrientTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
        )

    def to_dict(self) -> dict[str, float]:
        """Return the record as a plain mapping."""
        return {name: getattr(self, name) for name in NUTRIENT_FIELDS}


def sum_totals(items: Iterable[HasNutrients]) -> NutrientTotals:
    """Fold nutrient-bearing records into a single totals record."""
    total = NutrientTotals.zero()
    for item in items:
        total = total.plus(item)
    return total


def progress_ratios(totals: NutrientTotals, goals: NutrientTotals) -> dict[str, float]:
    """Return consumed/goal per nutrient; non-positive goals yield 0.0."""
    ratios: dict[str, float] = {}
    for name in NUTRIENT_FIELDS:
        goal = getattr(goals, name)
        ratios[name] = getattr(totals, name) / goal if goal > 0 else 0.0
    return ratios


def _validated_amount(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidNutrientsError(
            f"Nutrient '{name}' must be a number.", {"field": name}
        )
    amount = float(value)
    if not math.isfinite(amount) or amount < 0:
        raise InvalidNutrientsError(
            f"Nutrient '{name}' must be a non-negative finite number.",
            {"field": name},
        )
    return amount
