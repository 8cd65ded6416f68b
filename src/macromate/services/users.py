"""User profile, goals and weight history."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from macromate.domain.models import DEFAULT_GOALS, UserProfile, WeightEntry
from macromate.domain.nutrition import NUTRIENT_FIELDS, NutrientTotals
from macromate.errors import ValidationError

MIN_GOAL = 1.0

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""

    def create_profile(self, profile: UserProfile) -> None:
        """Create a profile document."""

    def update_profile(self, user_id: UUID, updates: dict[str, object]) -> None:
        """Apply a partial update to a profile document."""

    def update_goals(self, user_id: UUID, goals: NutrientTotals) -> None:
        """Overwrite the goals sub-record."""


class WeightRepository(Protocol):
    """Persistence interface for weight history."""

    def upsert_weight_entry(self, entry: WeightEntry) -> None:
        """Store the weight for a user and date, replacing that date's entry."""

    def list_weight_entries(self, user_id: UUID) -> list[WeightEntry]:
        """Return a user's weight history ordered by date."""


def _today() -> date:
    return datetime.now(tz=UTC).date()


@dataclass
class UserService:
    """Application service for profile lifecycle and settings."""

    profile_repository: ProfileRepository
    weight_repository: WeightRepository
    today: Callable[[], date] = _today

    def ensure_profile(
        self,
        user_id: UUID,
        email: str | None,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> UserProfile:
        """Return the user's profile, creating it with default goals if absent."""
        existing = self.profile_repository.get_profile(user_id)
        if existing:
            return existing

        profile = UserProfile(
            id=user_id,
            email=email,
            display_name=display_name,
            photo_url=photo_url,
            height=None,
            weight=None,
            goals=DEFAULT_GOALS,
        )
        self.profile_repository.create_profile(profile)
        _logger.info("Created profile for user %s", user_id)
        return profile

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if present."""
        return self.profile_repository.get_profile(user_id)

    def update_profile(
        self,
        user_id: UUID,
        display_name: str,
        height: float | None = None,
        weight: float | None = None,
    ) -> None:
        """Update profile fields; a weight is also appended to the history."""
        if not display_name.strip():
            raise ValidationError("Display name is required.", field="display_name")
        for field_name, value in (("height", height), ("weight", weight)):
            if value is not None and value <= 0:
                raise ValidationError(
                    f"{field_name.capitalize()} must be a positive number.",
                    field=field_name,
                )
        self.profile_repository.update_profile(
            user_id, {"display_name": display_name.strip(), "height": height}
        )
        if weight is not None:
            self.add_weight_entry(user_id, weight)

    def update_goals(self, user_id: UUID, goals: NutrientTotals) -> NutrientTotals:
        """Validate and store new daily goals."""
        for name in NUTRIENT_FIELDS:
            if getattr(goals, name) < MIN_GOAL:
                raise ValidationError(
                    f"{name.capitalize()} must be positive.", field=name
                )
        self.profile_repository.update_goals(user_id, goals)
        return goals

    def add_weight_entry(
        self, user_id: UUID, weight: float, day: date | None = None
    ) -> WeightEntry:
        """Record today's (or `day`'s) weight and mirror it onto the profile."""
        if weight <= 0:
            raise ValidationError("Weight must be a positive number.", field="weight")
        entry = WeightEntry(user_id=user_id, date=day or self.today(), weight=weight)
        self.weight_repository.upsert_weight_entry(entry)
        self.profile_repository.update_profile(user_id, {"weight": weight})
        return entry

    def get_weight_history(self, user_id: UUID) -> list[WeightEntry]:
        """Return weight entries ordered by date."""
        entries = self.weight_repository.list_weight_entries(user_id)
        return sorted(entries, key=lambda entry: entry.date)
