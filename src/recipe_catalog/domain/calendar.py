"""Domain models for the meal calendar."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

MEAL_TYPES = ("breakfast", "lunch", "dinner")


@dataclass(frozen=True)
class RecipeSummary:
    """Minimal recipe fields shown on a calendar day."""

    id: UUID
    name: str
    slug: str
    image_url: str | None


@dataclass(frozen=True)
class CalendarEntry:
    """A recipe scheduled for a user's date and meal slot."""

    id: UUID
    user_id: UUID
    recipe_id: UUID
    date: date
    meal_type: str
    notes: str | None
    recipe: RecipeSummary | None = None
