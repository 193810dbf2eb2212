"""Favorite recipe endpoints for signed-in users."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from recipe_catalog.api.dependencies import current_user, parse_tag_ids
from recipe_catalog.domain.users import UserRecord  # noqa: TC001

if TYPE_CHECKING:
    from recipe_catalog.containers import AppContainer

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("")
async def list_favorites(
    request: Request,
    tags: str | None = None,
    search: str | None = None,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Return the user's favorites, filtered like the catalog."""
    container: AppContainer = request.app.state.container
    recipes = container.favorite_service.list_favorites(
        user.id, parse_tag_ids(tags), search
    )
    return {"recipes": recipes}


@router.get("/{recipe_id}")
async def favorite_status(
    recipe_id: UUID, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, bool]:
    """Return whether the recipe is one of the user's favorites."""
    container: AppContainer = request.app.state.container
    return {"favorite": container.favorite_service.is_favorite(user.id, recipe_id)}


@router.put("/{recipe_id}")
async def add_favorite(
    recipe_id: UUID, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, bool]:
    """Favorite a recipe."""
    container: AppContainer = request.app.state.container
    container.favorite_service.add(user.id, recipe_id)
    return {"favorite": True}


@router.delete("/{recipe_id}")
async def remove_favorite(
    recipe_id: UUID, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, bool]:
    """Unfavorite a recipe."""
    container: AppContainer = request.app.state.container
    container.favorite_service.remove(user.id, recipe_id)
    return {"favorite": False}


@router.post("/{recipe_id}/toggle")
async def toggle_favorite(
    recipe_id: UUID, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, bool]:
    """Flip the favorite state and return the new state."""
    container: AppContainer = request.app.state.container
    return {"favorite": container.favorite_service.toggle(user.id, recipe_id)}
