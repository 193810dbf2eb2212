"""Supabase repository for recipes and their tag links."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from supabase import Client, PostgrestAPIError

from recipe_catalog.adapters.supabase_errors import translate_api_error
from recipe_catalog.adapters.supabase_tag_repository import parse_tag
from recipe_catalog.domain.recipes import IngredientRow, Recipe
from recipe_catalog.domain.tags import Tag
from recipe_catalog.errors import StorageError
from recipe_catalog.services.recipes import RecipeRepository

logger = logging.getLogger(__name__)

RECIPE_COLUMNS = (
    "*, "
    "recipe_tags(tag:tags(id, tag_group_id, name)), "
    "recipe_ingredients(tag:tags(id, tag_group_id, name))"
)


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipe persistence."""

    client: Client

    def list_recipes(self) -> list[Recipe]:
        """Return all recipes, newest first, with tags resolved."""
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return self._parse_rows(response.data or [])

    def list_recipes_by_ids(self, recipe_ids: Sequence[UUID]) -> list[Recipe]:
        """Return recipes for the ids, in the order given."""
        if not recipe_ids:
            return []
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .in_("id", [str(recipe_id) for recipe_id in recipe_ids])
            .execute()
        )
        by_id = {recipe.id: recipe for recipe in self._parse_rows(response.data or [])}
        return [by_id[recipe_id] for recipe_id in recipe_ids if recipe_id in by_id]

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        recipes = self._parse_rows(response.data or [])
        return recipes[0] if recipes else None

    def get_by_slug(self, slug: str) -> Recipe | None:
        """Return a recipe by slug, if present."""
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
        recipes = self._parse_rows(response.data or [])
        return recipes[0] if recipes else None

    def create_recipe(self, payload: dict[str, object]) -> UUID:
        """Insert a recipe row and return its id."""
        try:
            response = self.client.table("recipes").insert(payload).execute()
        except PostgrestAPIError as exc:
            message = f'Recipe slug "{payload.get("slug")}" already exists'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to create recipe")
        return UUID(str(response.data[0]["id"]))

    def update_recipe(self, recipe_id: UUID, payload: dict[str, object]) -> None:
        """Update a recipe row."""
        try:
            response = (
                self.client.table("recipes")
                .update(payload)
                .eq("id", str(recipe_id))
                .execute()
            )
        except PostgrestAPIError as exc:
            message = f'Recipe slug "{payload.get("slug")}" already exists'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to update recipe")

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe row; join rows cascade."""
        self.client.table("recipes").delete().eq("id", str(recipe_id)).execute()

    def link_tags(self, recipe_id: UUID, tag_ids: Sequence[UUID]) -> None:
        """Insert recipe_tags join rows."""
        self._link("recipe_tags", recipe_id, tag_ids)

    def link_ingredients(self, recipe_id: UUID, tag_ids: Sequence[UUID]) -> None:
        """Insert recipe_ingredients join rows."""
        self._link("recipe_ingredients", recipe_id, tag_ids)

    def clear_links(self, recipe_id: UUID) -> None:
        """Delete every join row for a recipe."""
        for table in ("recipe_tags", "recipe_ingredients"):
            self.client.table(table).delete().eq("recipe_id", str(recipe_id)).execute()

    def _link(self, table: str, recipe_id: UUID, tag_ids: Sequence[UUID]) -> None:
        if not tag_ids:
            return
        self.client.table(table).insert(
            [{"recipe_id": str(recipe_id), "tag_id": str(tag_id)} for tag_id in tag_ids]
        ).execute()

    def _parse_rows(self, rows: list[dict[str, object]]) -> list[Recipe]:
        """Parse recipe rows, resolving tags referenced only by structured rows."""
        recipes = [_parse_recipe(row) for row in rows]
        missing = {
            tag_id
            for recipe in recipes
            for tag_id in recipe.structured_tag_ids()
            if tag_id not in recipe.ingredient_tag_ids
        }
        if not missing:
            return recipes
        response = (
            self.client.table("tags")
            .select("id, tag_group_id, name")
            .in_("id", [str(tag_id) for tag_id in missing])
            .execute()
        )
        known = {tag.id: tag for tag in (parse_tag(row) for row in response.data or [])}
        return [_with_structured_tags(recipe, known) for recipe in recipes]


def _parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a recipe row with its embedded join rows."""
    created_by = row.get("created_by")
    return Recipe(
        id=UUID(str(row["id"])),
        slug=str(row["slug"]),
        name=str(row["name"]),
        image_url=row.get("image_url"),
        ingredients_text=row.get("ingredients_text") or "",
        instructions=row.get("instructions") or "",
        inspiration=row.get("inspiration") or "",
        ingredients_structured=_parse_ingredient_rows(
            row.get("ingredients_structured")
        ),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
        created_by=UUID(str(created_by)) if created_by else None,
        tags=_joined_tags(row.get("recipe_tags")),
        ingredient_tags=_joined_tags(row.get("recipe_ingredients")),
    )


def _parse_ingredient_rows(raw: object) -> list[IngredientRow]:
    if not isinstance(raw, list):
        return []
    rows = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        raw_tag_id = item.get("tagId")
        try:
            tag_id = UUID(str(raw_tag_id)) if raw_tag_id else None
        except ValueError:
            logger.warning("Skipping ingredient row with bad tagId: %s", raw_tag_id)
            continue
        rows.append(
            IngredientRow(
                quantity=str(item.get("quantity") or ""),
                tag_id=tag_id,
                notes=str(item.get("notes") or ""),
            )
        )
    return rows


def _joined_tags(raw: object) -> list[Tag]:
    tags: list[Tag] = []
    for link in raw or []:
        tag = link.get("tag") if isinstance(link, dict) else None
        if tag:
            tags.append(parse_tag(tag))
    return tags


def _with_structured_tags(recipe: Recipe, known: dict[UUID, Tag]) -> Recipe:
    extra = [
        known[tag_id]
        for tag_id in dict.fromkeys(recipe.structured_tag_ids())
        if tag_id in known and tag_id not in recipe.ingredient_tag_ids
    ]
    if not extra:
        return recipe
    return replace(recipe, ingredient_tags=[*recipe.ingredient_tags, *extra])


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None
