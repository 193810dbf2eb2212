"""Meal calendar service."""

import calendar
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import Protocol
from uuid import UUID

from recipe_catalog.domain.calendar import MEAL_TYPES, CalendarEntry
from recipe_catalog.errors import NotFoundError, ValidationError
from recipe_catalog.services.recipes import RecipeService


class CalendarRepository(Protocol):
    """Persistence interface for calendar entries."""

    def list_entries(
        self, user_id: UUID, start: date, end: date
    ) -> list[CalendarEntry]:
        """Return entries between start and end inclusive, by date then slot."""

    def get_entry(self, entry_id: UUID) -> CalendarEntry | None:
        """Return an entry by id, if present."""

    def upsert_entry(
        self,
        user_id: UUID,
        recipe_id: UUID,
        day: date,
        meal_type: str,
        notes: str | None,
    ) -> CalendarEntry:
        """Insert or replace the entry for the user's date and meal slot."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry."""


@dataclass
class CalendarService:
    """Service for scheduling recipes by date and meal slot."""

    repository: CalendarRepository
    recipe_service: RecipeService

    def list_month(self, user_id: UUID, year: int, month: int) -> list[CalendarEntry]:
        """Return a user's entries for a calendar month."""
        start, end = month_range(year, month)
        return _sorted(self.repository.list_entries(user_id, start, end))

    def entries_for_date(self, user_id: UUID, day: date) -> list[CalendarEntry]:
        """Return a user's entries for one day."""
        return _sorted(self.repository.list_entries(user_id, day, day))

    def save_entry(
        self,
        user_id: UUID,
        recipe_id: UUID | None,
        day: date | None,
        meal_type: str | None,
        notes: str | None = None,
    ) -> CalendarEntry:
        """Schedule a recipe, replacing whatever held that date and slot."""
        if day is None or not meal_type or recipe_id is None:
            raise ValidationError("Please select a date, meal type, and recipe")
        if meal_type not in MEAL_TYPES:
            raise ValidationError(f"Unknown meal type: {meal_type}")
        self.recipe_service.get(recipe_id)
        return self.repository.upsert_entry(
            user_id=user_id,
            recipe_id=recipe_id,
            day=day,
            meal_type=meal_type,
            notes=(notes or "").strip() or None,
        )

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete one of the user's entries."""
        entry = self.repository.get_entry(entry_id)
        if entry is None or entry.user_id != user_id:
            raise NotFoundError("Calendar entry not found")
        self.repository.delete_entry(entry_id)


def suggest_meal_type(entries: Sequence[CalendarEntry]) -> str:
    """Return the first free meal slot of the day, else breakfast."""
    taken = {entry.meal_type for entry in entries}
    for meal_type in MEAL_TYPES:
        if meal_type not in taken:
            return meal_type
    return MEAL_TYPES[0]


def month_range(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a month."""
    if not 1 <= month <= 12:  # noqa: PLR2004
        raise ValidationError(f"Invalid month: {month}")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"Invalid year: {year}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def calendar_weeks(year: int, month: int) -> list[list[date]]:
    """Return Monday-first weeks covering the whole month."""
    start, end = month_range(year, month)
    try:
        grid_start = start - timedelta(days=start.weekday())
        grid_end = end + timedelta(days=6 - end.weekday())
    except OverflowError as exc:
        raise ValidationError(f"Month out of range: {year}-{month:02d}") from exc
    weeks: list[list[date]] = []
    current = grid_start
    while current <= grid_end:
        weeks.append([current + timedelta(days=offset) for offset in range(7)])
        current += timedelta(days=7)
    return weeks


def _sorted(entries: Sequence[CalendarEntry]) -> list[CalendarEntry]:
    return sorted(
        entries, key=lambda entry: (entry.date, MEAL_TYPES.index(entry.meal_type))
    )
