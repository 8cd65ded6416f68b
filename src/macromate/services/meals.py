"""Meal logging service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from macromate.domain.meals import (
    DEFAULT_EDITED_MEAL_NAME,
    DEFAULT_MEAL_NAME,
    FoodItem,
    Meal,
    MealDraft,
    MealPhoto,
)
from macromate.domain.nutrition import NutrientTotals, sum_totals
from macromate.errors import MealNotFoundError, MealValidationError, PhotoNotFoundError
from macromate.services.vision import detect_mime_type

EMPTY_MEAL_MESSAGE = "At least one food item is required."

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def create_meal(self, meal: Meal) -> Meal:
        """Persist a new meal and return it as stored."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id, if present."""

    def update_meal_items(
        self,
        meal_id: UUID,
        name: str,
        food_items: list[FoodItem],
        totals: NutrientTotals,
    ) -> None:
        """Replace name, food items and totals in a single write.

        Raise MealNotFoundError when no row matched.
        """

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal document."""

    def list_meals_for_day(self, user_id: UUID, day: date) -> list[Meal]:
        """Return a user's meals for a date, newest first."""

    def list_meals_between(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        """Return a user's meals dated within [start, end]."""


class PhotoStorage(Protocol):
    """Object storage for meal photos."""

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store bytes at `path` and return a retrievable URL."""

    def delete(self, path: str) -> None:
        """Delete the object at `path`; raise PhotoNotFoundError if absent."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealService:
    """Validates, totals and persists meals."""

    repository: MealRepository
    photo_storage: PhotoStorage
    clock: Callable[[], datetime] = _utc_now

    def save_meal(
        self, user_id: UUID, draft: MealDraft, photo: bytes | None = None
    ) -> Meal:
        """Persist a new meal with totals computed from its food items."""
        _require_items(draft.food_items)
        meal_id = uuid4()
        meal_photo = None
        if photo:
            path = photo_path(user_id, meal_id)
            url = self.photo_storage.upload(path, photo, detect_mime_type(photo))
            meal_photo = MealPhoto(url=url, path=path)

        meal = Meal(
            id=meal_id,
            user_id=user_id,
            date=draft.date,
            name=draft.name.strip() or DEFAULT_MEAL_NAME,
            category=draft.category,
            food_items=list(draft.food_items),
            totals=sum_totals(draft.food_items),
            created_at=self.clock(),
            photo=meal_photo,
        )
        try:
            saved = self.repository.create_meal(meal)
        except Exception:
            if meal_photo is not None:
                self._discard_photo(meal_photo)
            raise
        _logger.info("Saved meal %s with %s items", saved.id, len(saved.food_items))
        return saved

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal:
        """Return a meal owned by the user."""
        meal = self.repository.get_meal(meal_id)
        if meal is None or meal.user_id != user_id:
            raise MealNotFoundError(meal_id)
        return meal

    def update_meal(
        self,
        user_id: UUID,
        meal_id: UUID,
        food_items: list[FoodItem],
        name: str | None = None,
    ) -> Meal:
        """Reconcile an edited food list into the stored meal.

        Totals are recomputed from `food_items` and written together with
        them. An empty list is rejected before anything is read or written.
        The meal's photo is left as it was. `name=None` keeps the stored name.
        """
        _require_items(food_items)
        current = self.get_meal(user_id, meal_id)
        if name is None:
            resolved_name = current.name
        else:
            resolved_name = name.strip() or DEFAULT_EDITED_MEAL_NAME
        totals = sum_totals(food_items)
        self.repository.update_meal_items(
            meal_id, name=resolved_name, food_items=list(food_items), totals=totals
        )
        return replace(
            current, name=resolved_name, food_items=list(food_items), totals=totals
        )

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> None:
        """Delete a meal and its photo, if it has one."""
        meal = self.get_meal(user_id, meal_id)
        if meal.photo is not None:
            self._discard_photo(meal.photo)
        self.repository.delete_meal(meal_id)
        _logger.info("Deleted meal %s", meal_id)

    def start_edit(self, user_id: UUID, meal_id: UUID) -> "MealEditSession":
        """Open an in-memory edit buffer for a stored meal."""
        return MealEditSession(meal=self.get_meal(user_id, meal_id))

    def commit_edit(self, session: "MealEditSession") -> Meal:
        """Persist the food items of an edit session."""
        return self.update_meal(
            session.meal.user_id,
            session.meal.id,
            session.items,
            name=session.name,
        )

    def _discard_photo(self, photo: MealPhoto) -> None:
        try:
            self.photo_storage.delete(photo.path)
        except PhotoNotFoundError:
            _logger.info("Photo %s already absent from storage", photo.path)
        except Exception:
            _logger.warning(
                "Could not delete photo %s, continuing", photo.path, exc_info=True
            )


@dataclass
class MealEditSession:
    """Local additions and removals applied to a stored meal."""

    meal: Meal
    name: str | None = None
    items: list[FoodItem] = field(init=False)

    def __post_init__(self) -> None:
        self.items = list(self.meal.food_items)

    @property
    def totals(self) -> NutrientTotals:
        """Return running totals of the edited items."""
        return sum_totals(self.items)

    @property
    def can_save(self) -> bool:
        """Return True when the edit holds at least one item."""
        return bool(self.items)

    def add(self, item: FoodItem) -> None:
        """Append a food item."""
        self.items = [*self.items, item]

    def remove(self, item_id: str) -> bool:
        """Remove a food item by id; return False if it was not present."""
        remaining = [item for item in self.items if item.id != item_id]
        removed = len(remaining) != len(self.items)
        self.items = remaining
        return removed


def photo_path(user_id: UUID, meal_id: UUID) -> str:
    """Storage key for a meal photo."""
    return f"meals/{user_id}/{meal_id}"


def _require_items(food_items: list[FoodItem]) -> None:
    if not food_items:
        raise MealValidationError(EMPTY_MEAL_MESSAGE, field="food_items")
