"""Photo identification with concurrent per-item nutrient lookups.

A photo yields N food names; each name gets its own lookup task. Tasks run
independently: one failing or timing out never cancels the others. Results
are written back as "replace element i" against the session's current item
list, tagged with the generation that started them, so a lookup resolving
after `reset()` or a newer `start()` is discarded instead of overwriting
fresh state.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from macromate.domain.identification import IdentifiedFood, LookupStatus
from macromate.domain.meals import DEFAULT_SERVING_SIZE, FoodItem
from macromate.domain.nutrition import NutrientTotals
from macromate.services.vision import VisionService

_logger = logging.getLogger(__name__)


class MacroLookup(Protocol):
    """Anything that can estimate nutrients for a named food."""

    async def lookup(
        self, food_name: str, serving_size: str = DEFAULT_SERVING_SIZE
    ) -> NutrientTotals:
        """Return nutrients for the food and serving."""


@dataclass
class IdentificationSession:
    """Tracks the lookup state of every food identified in one photo."""

    lookup_service: MacroLookup
    timeout_seconds: float = 20.0
    _items: list[IdentifiedFood] = field(default_factory=list)
    _tasks: list[asyncio.Task[None]] = field(default_factory=list)
    _generation: int = 0

    @property
    def items(self) -> list[IdentifiedFood]:
        """Return a snapshot of the per-item states."""
        return list(self._items)

    @property
    def generation(self) -> int:
        """Return the id of the current lookup round."""
        return self._generation

    @property
    def can_save(self) -> bool:
        """Return True once at least one lookup has succeeded."""
        return any(item.status is LookupStatus.LOADED for item in self._items)

    @property
    def pending(self) -> bool:
        """Return True while any lookup is still loading."""
        return any(item.status is LookupStatus.LOADING for item in self._items)

    def start(
        self, names: list[str], serving_size: str = DEFAULT_SERVING_SIZE
    ) -> int:
        """Reset state and launch one lookup per name; return the generation."""
        self.reset()
        generation = self._generation
        self._items = [
            IdentifiedFood(name=name, serving_size=serving_size) for name in names
        ]
        self._tasks = [
            asyncio.create_task(self._resolve(generation, index, name, serving_size))
            for index, name in enumerate(names)
        ]
        return generation

    def reset(self) -> None:
        """Drop all state and stop in-flight lookups from reporting back."""
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self._items = []
        self._generation += 1

    async def wait(self) -> list[IdentifiedFood]:
        """Wait until every lookup of the current round has settled."""
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        return self.items

    def apply(self, generation: int, index: int, **changes: object) -> bool:
        """Replace item `index` with updated fields if `generation` is current."""
        if generation != self._generation:
            return False
        if not 0 <= index < len(self._items):
            return False
        items = list(self._items)
        items[index] = replace(items[index], **changes)
        self._items = items
        return True

    def loaded_food_items(self) -> list[FoodItem]:
        """Return successfully looked-up items, ready to be saved in a meal."""
        return [
            FoodItem.from_nutrients(item.name, item.nutrients, item.serving_size)
            for item in self._items
            if item.status is LookupStatus.LOADED and item.nutrients is not None
        ]

    async def _resolve(
        self, generation: int, index: int, name: str, serving_size: str
    ) -> None:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                nutrients = await self.lookup_service.lookup(name, serving_size)
        except TimeoutError:
            _logger.warning("Lookup timed out for %s", name)
            self.apply(
                generation, index, status=LookupStatus.ERROR, error="Lookup timed out."
            )
            return
        except Exception as exc:
            _logger.warning("Lookup failed for %s: %s", name, exc)
            self.apply(
                generation,
                index,
                status=LookupStatus.ERROR,
                error=str(exc) or type(exc).__name__,
            )
            return
        self.apply(
            generation, index, status=LookupStatus.LOADED, nutrients=nutrients
        )


@dataclass
class IdentificationService:
    """Runs vision identification followed by the lookup fan-out."""

    vision_service: VisionService
    lookup_service: MacroLookup
    timeout_seconds: float = 20.0

    def new_session(self) -> IdentificationSession:
        """Create an empty identification session."""
        return IdentificationSession(
            lookup_service=self.lookup_service,
            timeout_seconds=self.timeout_seconds,
        )

    async def identify_meal(
        self, image_bytes: bytes, serving_size: str = DEFAULT_SERVING_SIZE
    ) -> list[IdentifiedFood]:
        """Identify foods in a photo and settle every nutrient lookup."""
        names = await self.vision_service.identify(image_bytes)
        session = self.new_session()
        session.start(names, serving_size)
        return await session.wait()
