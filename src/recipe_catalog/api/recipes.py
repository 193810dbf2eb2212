"""Public catalog endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from recipe_catalog.api.dependencies import parse_tag_ids

if TYPE_CHECKING:
    from recipe_catalog.containers import AppContainer

router = APIRouter(tags=["recipes"])


@router.get("/recipes")
async def list_recipes(
    request: Request, tags: str | None = None, search: str | None = None
) -> dict[str, object]:
    """Return recipes filtered by comma-separated tag ids and search text."""
    container: AppContainer = request.app.state.container
    recipes = container.recipe_service.browse(parse_tag_ids(tags), search)
    return {"recipes": recipes}


@router.get("/recipes/{slug}")
async def recipe_detail(slug: str, request: Request) -> dict[str, object]:
    """Return one recipe with its rich text rendered to HTML."""
    container: AppContainer = request.app.state.container
    detail = container.recipe_service.get_detail(slug)
    return {
        "recipe": detail.recipe,
        "ingredientsHtml": detail.ingredients_html,
        "instructionsHtml": detail.instructions_html,
        "inspirationHtml": detail.inspiration_html,
        "tags": detail.display_tags,
    }


@router.get("/tag-groups")
async def list_tag_groups(request: Request) -> dict[str, object]:
    """Return tag groups in display order with their tags."""
    container: AppContainer = request.app.state.container
    return {"tagGroups": container.tag_service.list_tag_groups()}
