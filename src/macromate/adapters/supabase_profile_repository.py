"""Supabase-backed profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from macromate.adapters.supabase_errors import execute
from macromate.domain.models import DEFAULT_GOALS, UserProfile
from macromate.domain.nutrition import NutrientTotals
from macromate.services.users import ProfileRepository

_COLUMNS = "id, email, display_name, photo_url, height, weight, goals"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""
        response = execute(
            self.client.table("profiles")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1),
            "get_profile",
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create_profile(self, profile: UserProfile) -> None:
        """Insert a profile row."""
        execute(
            self.client.table("profiles").insert(
                {
                    "id": str(profile.id),
                    "email": profile.email,
                    "display_name": profile.display_name,
                    "photo_url": profile.photo_url,
                    "height": profile.height,
                    "weight": profile.weight,
                    "goals": profile.goals.to_dict(),
                }
            ),
            "create_profile",
        )

    def update_profile(self, user_id: UUID, updates: dict[str, object]) -> None:
        """Apply a partial update to a profile row."""
        execute(
            self.client.table("profiles").update(updates).eq("id", str(user_id)),
            "update_profile",
        )

    def update_goals(self, user_id: UUID, goals: NutrientTotals) -> None:
        """Overwrite the goals column."""
        execute(
            self.client.table("profiles")
            .update({"goals": goals.to_dict()})
            .eq("id", str(user_id)),
            "update_goals",
        )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)  # type: ignore[arg-type]


def _parse_profile(row: dict[str, object]) -> UserProfile:
    raw_goals = row.get("goals")
    goals = (
        NutrientTotals.from_mapping(raw_goals)
        if isinstance(raw_goals, dict)
        else DEFAULT_GOALS
    )
    return UserProfile(
        id=UUID(str(row["id"])),
        email=row.get("email"),  # type: ignore[arg-type]
        display_name=row.get("display_name"),  # type: ignore[arg-type]
        photo_url=row.get("photo_url"),  # type: ignore[arg-type]
        height=_optional_float(row.get("height")),
        weight=_optional_float(row.get("weight")),
        goals=goals,
    )
