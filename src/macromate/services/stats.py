"""Daily and weekly nutrient statistics."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from macromate.domain.meals import Meal
from macromate.domain.models import DEFAULT_GOALS
from macromate.domain.nutrition import NutrientTotals, progress_ratios, sum_totals
from macromate.domain.stats import DailySummary, TrendPoint, WeeklyTrends
from macromate.services.meals import MealRepository
from macromate.services.users import ProfileRepository

TREND_WINDOW_DAYS = 7


@dataclass
class StatsService:
    """Service for computing daily totals and weekly trends."""

    meal_repository: MealRepository
    profile_repository: ProfileRepository

    def get_daily(self, user_id: UUID, day: date) -> DailySummary:
        """Return a day's meals and totals measured against the user's goals."""
        meals = self.meal_repository.list_meals_for_day(user_id, day)
        totals = sum_totals(meal.totals for meal in meals)
        goals = self._goals(user_id)
        return DailySummary(
            day=day,
            meals=meals,
            totals=totals,
            goals=goals,
            progress=progress_ratios(totals, goals),
        )

    def get_weekly_trends(
        self,
        user_id: UUID,
        anchor: date | None = None,
        timezone_name: str = "UTC",
    ) -> WeeklyTrends:
        """Return per-day totals for the 7 days ending at `anchor`, inclusive."""
        end = anchor or datetime.now(tz=ZoneInfo(timezone_name)).date()
        start = end - timedelta(days=TREND_WINDOW_DAYS - 1)
        meals = self.meal_repository.list_meals_between(user_id, start, end)
        return aggregate_trends(start, meals)

    def _goals(self, user_id: UUID) -> NutrientTotals:
        profile = self.profile_repository.get_profile(user_id)
        if profile is None:
            return DEFAULT_GOALS
        return profile.goals


def aggregate_trends(start: date, meals: list[Meal]) -> WeeklyTrends:
    """Bucket meals by `Meal.date` into a fixed 7-day window from `start`."""
    buckets: dict[date, NutrientTotals] = {
        start + timedelta(days=offset): NutrientTotals.zero()
        for offset in range(TREND_WINDOW_DAYS)
    }
    for meal in meals:
        if meal.date in buckets:
            buckets[meal.date] = buckets[meal.date].plus(meal.totals)

    points = [
        TrendPoint(
            date=day,
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fat=totals.fat,
            fiber=totals.fiber,
        )
        for day, totals in sorted(buckets.items())
    ]
    week = sum_totals(buckets.values())
    averages = NutrientTotals(
        calories=week.calories / TREND_WINDOW_DAYS,
        protein=week.protein / TREND_WINDOW_DAYS,
        carbs=week.carbs / TREND_WINDOW_DAYS,
        fat=week.fat / TREND_WINDOW_DAYS,
        fiber=week.fiber / TREND_WINDOW_DAYS,
    )
    return WeeklyTrends(points=points, averages=averages)

