"""Supabase-backed weight history repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from macromate.adapters.supabase_errors import execute
from macromate.domain.models import WeightEntry
from macromate.services.users import WeightRepository


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Supabase implementation for weight entries."""

    client: Client

    def upsert_weight_entry(self, entry: WeightEntry) -> None:
        """Store one weigh-in per user and date."""
        execute(
            self.client.table("weight_entries").upsert(
                {
                    "user_id": str(entry.user_id),
                    "date": entry.date.isoformat(),
                    "weight": entry.weight,
                },
                on_conflict="user_id,date",
            ),
            "upsert_weight_entry",
        )

    def list_weight_entries(self, user_id: UUID) -> list[WeightEntry]:
        """Return a user's weight history ordered by date."""
        response = execute(
            self.client.table("weight_entries")
            .select("user_id, date, weight")
            .eq("user_id", str(user_id))
            .order("date", desc=False),
            "list_weight_entries",
        )
        return [
            WeightEntry(
                user_id=UUID(str(row["user_id"])),
                date=date.fromisoformat(str(row["date"])),
                weight=float(row["weight"]),
            )
            for row in response.data or []
        ]
