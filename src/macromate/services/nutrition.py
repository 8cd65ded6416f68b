"""Nutrient estimates for named foods via a structured-output model."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from macromate.domain.meals import DEFAULT_SERVING_SIZE
from macromate.domain.nutrition import NutrientTotals
from macromate.domain.vision import MacroEstimate
from macromate.errors import LookupFailedError
from macromate.services.cache import Cache
from macromate.services.vision import StructuredOutputClient

_NUMBER = {"type": "number", "minimum": 0}

MACRO_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbs": _NUMBER,
        "fat": _NUMBER,
        "fiber": _NUMBER,
    },
    "required": ["calories", "protein", "carbs", "fat", "fiber"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


@dataclass
class MacroLookupService:
    """Looks up calories and macros for a food and serving size."""

    client: StructuredOutputClient
    cache: Cache
    model: str
    reasoning_effort: str | None
    store: bool
    cache_ttl_seconds: int = 86400

    async def lookup(
        self, food_name: str, serving_size: str = DEFAULT_SERVING_SIZE
    ) -> NutrientTotals:
        """Return estimated nutrients for the serving, using the cache."""
        serving = serving_size.strip() or DEFAULT_SERVING_SIZE
        cache_key = f"macros:{food_name.strip().lower()}:{serving.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutrientTotals):
            return cached

        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=_lookup_prompt(food_name, serving),
            schema=MACRO_SCHEMA,
            schema_name="lookup_macros",
        )
        try:
            totals = MacroEstimate.model_validate(raw).to_totals()
        except ValidationError as exc:
            _logger.warning("Macro lookup returned invalid data for %s", food_name)
            raise LookupFailedError(
                f'Could not find nutritional information for "{food_name}".',
                {"food_name": food_name},
            ) from exc
        self.cache.set(cache_key, totals, ttl_seconds=self.cache_ttl_seconds)
        return totals


def _lookup_prompt(food_name: str, serving_size: str) -> str:
    return (
        "You are a nutritional expert. Given a food item and its serving size, "
        "look up its nutritional information: calories (kcal) and protein, "
        "carbs, fat and fiber (grams) for that serving.\n\n"
        f"Food Item: {food_name}\n"
        f"Serving Size: {serving_size}"
    )
