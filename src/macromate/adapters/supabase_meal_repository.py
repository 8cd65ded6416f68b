"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

from supabase import Client

from macromate.adapters.supabase_errors import execute
from macromate.domain.meals import (
    DEFAULT_SERVING_SIZE,
    FoodItem,
    Meal,
    MealCategory,
    MealPhoto,
)
from macromate.domain.nutrition import NutrientTotals
from macromate.errors import MealNotFoundError, PersistenceError
from macromate.services.meals import MealRepository

_COLUMNS = (
    "id, user_id, date, name, category, food_items, total_calories, "
    "total_protein, total_carbs, total_fat, total_fiber, photo_url, photo_path, "
    "created_at"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def create_meal(self, meal: Meal) -> Meal:
        """Insert a meal row and return the stored meal."""
        payload = {
            "id": str(meal.id),
            "user_id": str(meal.user_id),
            "date": meal.date.isoformat(),
            "name": meal.name,
            "category": meal.category.value,
            "created_at": meal.created_at.isoformat(),
            "photo_url": meal.photo.url if meal.photo else None,
            "photo_path": meal.photo.path if meal.photo else None,
            **_items_payload(meal.food_items, meal.totals),
        }
        response = execute(self.client.table("meals").insert(payload), "create_meal")
        if not response.data:
            raise PersistenceError("Failed to create meal", operation="create_meal")
        return _parse_meal(response.data[0])

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = execute(
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1),
            "get_meal",
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def update_meal_items(
        self,
        meal_id: UUID,
        name: str,
        food_items: list[FoodItem],
        totals: NutrientTotals,
    ) -> None:
        """Write name, items and totals in one row update."""
        payload = {"name": name, **_items_payload(food_items, totals)}
        response = execute(
            self.client.table("meals").update(payload).eq("id", str(meal_id)),
            "update_meal",
        )
        if not response.data:
            raise MealNotFoundError(meal_id)

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row."""
        execute(
            self.client.table("meals").delete().eq("id", str(meal_id)), "delete_meal"
        )

    def list_meals_for_day(self, user_id: UUID, day: date) -> list[Meal]:
        """Return a user's meals for a date, newest first."""
        response = execute(
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .or_(_date_range_filter(day, day))
            .order("created_at", desc=True),
            "list_meals_for_day",
        )
        return [_parse_meal(row) for row in response.data or []]

    def list_meals_between(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        """Return a user's meals dated within [start, end]."""
        response = execute(
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .or_(_date_range_filter(start, end))
            .order("created_at", desc=False),
            "list_meals_between",
        )
        return [_parse_meal(row) for row in response.data or []]


def _date_range_filter(start: date, end: date) -> str:
    """PostgREST `or` filter for meals dated within [start, end].

    Rows without a date match on the UTC day of `created_at`, the same day
    `_parse_meal` assigns them.
    """
    since = datetime.combine(start, time.min, tzinfo=UTC)
    until = datetime.combine(end + timedelta(days=1), time.min, tzinfo=UTC)
    return (
        f"and(date.gte.{start.isoformat()},date.lte.{end.isoformat()}),"
        f"and(date.is.null,created_at.gte.{_timestamp(since)},"
        f"created_at.lt.{_timestamp(until)})"
    )


def _timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def _items_payload(
    food_items: list[FoodItem], totals: NutrientTotals
) -> dict[str, object]:
    return {
        "food_items": [
            {
                "id": item.id,
                "name": item.name,
                "serving_size": item.serving_size,
                **item.nutrients.to_dict(),
            }
            for item in food_items
        ],
        "total_calories": totals.calories,
        "total_protein": totals.protein,
        "total_carbs": totals.carbs,
        "total_fat": totals.fat,
        "total_fiber": totals.fiber,
    }


def _parse_meal(row: dict[str, object]) -> Meal:
    created_at = datetime.fromisoformat(str(row["created_at"]))
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    raw_date = row.get("date")
    # Rows written without a date count on the UTC day they were created.
    meal_date = (
        date.fromisoformat(str(raw_date))
        if raw_date
        else created_at.astimezone(UTC).date()
    )
    photo_url = row.get("photo_url")
    photo_path = row.get("photo_path")
    return Meal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        date=meal_date,
        name=str(row.get("name") or ""),
        category=MealCategory(row.get("category") or MealCategory.SNACKS),
        food_items=[_parse_item(item) for item in row.get("food_items") or []],
        totals=NutrientTotals.from_mapping(
            {
                "calories": row.get("total_calories"),
                "protein": row.get("total_protein"),
                "carbs": row.get("total_carbs"),
                "fat": row.get("total_fat"),
                "fiber": row.get("total_fiber"),
            }
        ),
        created_at=created_at,
        photo=(
            MealPhoto(url=str(photo_url), path=str(photo_path))
            if photo_url and photo_path
            else None
        ),
    )


def _parse_item(raw: dict[str, object]) -> FoodItem:
    return FoodItem.from_nutrients(
        name=str(raw.get("name") or ""),
        nutrients=NutrientTotals.from_mapping(raw),
        serving_size=str(raw.get("serving_size") or DEFAULT_SERVING_SIZE),
        item_id=str(raw["id"]) if raw.get("id") else None,
    )
