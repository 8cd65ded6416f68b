"""Domain models for users and their settings."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from macromate.domain.nutrition import NutrientTotals

DEFAULT_GOALS = NutrientTotals(
    calories=2000,
    protein=150,
    carbs=250,
    fat=67,
    fiber=25,
)


@dataclass(frozen=True)
class UserProfile:
    """Represents a user's profile document."""

    id: UUID
    email: str | None
    display_name: str | None
    photo_url: str | None
    height: float | None
    weight: float | None
    goals: NutrientTotals


@dataclass(frozen=True)
class WeightEntry:
    """A single weigh-in; at most one per user and date."""

    user_id: UUID
    date: date
    weight: float


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity returned by the auth provider."""

    id: UUID
    email: str | None


@dataclass(frozen=True)
class AuthSession:
    """Tokens issued after a successful sign-in."""

    user: AuthenticatedUser
    access_token: str
    refresh_token: str | None
