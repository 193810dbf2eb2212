"""Supabase repository for meal calendar entries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from recipe_catalog.domain.calendar import CalendarEntry, RecipeSummary
from recipe_catalog.errors import StorageError
from recipe_catalog.services.calendar import CalendarRepository

ENTRY_COLUMNS = "*, recipe:recipes(id, name, slug, image_url)"


@dataclass
class SupabaseCalendarRepository(CalendarRepository):
    """Supabase implementation for calendar persistence."""

    client: Client

    def list_entries(
        self, user_id: UUID, start: date, end: date
    ) -> list[CalendarEntry]:
        """Return entries between start and end inclusive, by date."""
        response = (
            self.client.table("calendar_entries")
            .select(ENTRY_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date")
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, entry_id: UUID) -> CalendarEntry | None:
        """Return an entry by id, if present."""
        response = (
            self.client.table("calendar_entries")
            .select(ENTRY_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def upsert_entry(
        self,
        user_id: UUID,
        recipe_id: UUID,
        day: date,
        meal_type: str,
        notes: str | None,
    ) -> CalendarEntry:
        """Insert or replace the entry for the user's date and meal slot."""
        response = (
            self.client.table("calendar_entries")
            .upsert(
                {
                    "user_id": str(user_id),
                    "recipe_id": str(recipe_id),
                    "date": day.isoformat(),
                    "meal_type": meal_type,
                    "notes": notes,
                },
                on_conflict="user_id,date,meal_type",
            )
            .execute()
        )
        if not response.data:
            raise StorageError("Failed to save calendar entry")
        entry = _parse_entry(response.data[0])
        return self.get_entry(entry.id) or entry

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry."""
        self.client.table("calendar_entries").delete().eq(
            "id", str(entry_id)
        ).execute()


def _parse_entry(row: dict[str, object]) -> CalendarEntry:
    """Parse a calendar row with its optional recipe summary."""
    recipe_row = row.get("recipe")
    recipe = None
    if isinstance(recipe_row, dict):
        recipe = RecipeSummary(
            id=UUID(str(recipe_row["id"])),
            name=str(recipe_row["name"]),
            slug=str(recipe_row["slug"]),
            image_url=recipe_row.get("image_url"),
        )
    return CalendarEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        recipe_id=UUID(str(row["recipe_id"])),
        date=date.fromisoformat(str(row["date"])),
        meal_type=str(row["meal_type"]),
        notes=row.get("notes"),
        recipe=recipe,
    )
