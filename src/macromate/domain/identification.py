"""Per-item state for photo identification lookups."""

from dataclasses import dataclass
from enum import StrEnum

from macromate.domain.meals import DEFAULT_SERVING_SIZE
from macromate.domain.nutrition import NutrientTotals


class LookupStatus(StrEnum):
    """Lifecycle of a single nutrient lookup."""

    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class IdentifiedFood:
    """A food name guessed from a photo and the state of its lookup."""

    name: str
    status: LookupStatus = LookupStatus.LOADING
    serving_size: str = DEFAULT_SERVING_SIZE
    nutrients: NutrientTotals | None = None
    error: str | None = None
