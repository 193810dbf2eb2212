"""Meal calendar endpoints for signed-in users."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from recipe_catalog.api.dependencies import current_user
from recipe_catalog.api.models import CalendarEntryBody  # noqa: TC001
from recipe_catalog.domain.calendar import MEAL_TYPES
from recipe_catalog.domain.users import UserRecord  # noqa: TC001
from recipe_catalog.services.calendar import calendar_weeks, suggest_meal_type

if TYPE_CHECKING:
    from recipe_catalog.containers import AppContainer

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("")
async def month_view(
    request: Request,
    year: int | None = None,
    month: int | None = None,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Return the month grid and the user's entries in it."""
    container: AppContainer = request.app.state.container
    today = datetime.now(tz=UTC).date()
    year = year or today.year
    month = month or today.month
    entries = container.calendar_service.list_month(user.id, year, month)
    return {
        "year": year,
        "month": month,
        "weeks": calendar_weeks(year, month),
        "mealTypes": list(MEAL_TYPES),
        "entries": entries,
    }


@router.get("/{day}")
async def day_view(
    day: date, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, object]:
    """Return one day's entries and the first free meal slot."""
    container: AppContainer = request.app.state.container
    entries = container.calendar_service.entries_for_date(user.id, day)
    return {
        "date": day,
        "entries": entries,
        "suggestedMealType": suggest_meal_type(entries),
    }


@router.put("")
async def save_entry(
    body: CalendarEntryBody,
    request: Request,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Schedule a recipe into a date and meal slot."""
    container: AppContainer = request.app.state.container
    entry = container.calendar_service.save_entry(
        user_id=user.id,
        recipe_id=body.recipe_id,
        day=body.day,
        meal_type=body.meal_type,
        notes=body.notes,
    )
    return {"entry": entry}


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: UUID, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, str]:
    """Remove one of the user's calendar entries."""
    container: AppContainer = request.app.state.container
    container.calendar_service.delete_entry(user.id, entry_id)
    return {"status": "ok"}
