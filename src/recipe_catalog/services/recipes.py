"""Recipe catalog services."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from recipe_catalog.domain.recipes import (
    IngredientRow,
    Recipe,
    RecipeDetail,
    RecipeDraft,
)
from recipe_catalog.domain.tags import Tag
from recipe_catalog.errors import NotFoundError, ValidationError
from recipe_catalog.services.documents import (
    ensure_document,
    render_html,
    structured_ingredients_document,
)
from recipe_catalog.services.tag_filter import (
    INGREDIENT_KEYWORDS,
    apply_filters,
    build_group_index,
    is_ingredient_group,
)
from recipe_catalog.services.tags import TagRepository

logger = logging.getLogger(__name__)

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


class RecipeRepository(Protocol):
    """Persistence interface for recipes and their tag links."""

    def list_recipes(self) -> list[Recipe]:
        """Return all recipes, newest first, with tags resolved."""

    def list_recipes_by_ids(self, recipe_ids: Sequence[UUID]) -> list[Recipe]:
        """Return recipes for the ids, in the order given."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""

    def get_by_slug(self, slug: str) -> Recipe | None:
        """Return a recipe by slug, if present."""

    def create_recipe(self, payload: dict[str, object]) -> UUID:
        """Insert a recipe row and return its id."""

    def update_recipe(self, recipe_id: UUID, payload: dict[str, object]) -> None:
        """Update a recipe row."""

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe row."""

    def link_tags(self, recipe_id: UUID, tag_ids: Sequence[UUID]) -> None:
        """Insert recipe_tags join rows."""

    def link_ingredients(self, recipe_id: UUID, tag_ids: Sequence[UUID]) -> None:
        """Insert recipe_ingredients join rows."""

    def clear_links(self, recipe_id: UUID) -> None:
        """Delete every join row for a recipe."""


class ImageStorage(Protocol):
    """Storage interface for recipe images."""

    def upload(self, path: str, content: bytes, content_type: str | None) -> str:
        """Store the image and return its public URL."""


@dataclass
class RecipeService:
    """Application service for browsing and editing recipes."""

    repository: RecipeRepository
    tag_repository: TagRepository
    image_storage: ImageStorage
    ingredient_keywords: Sequence[str] = INGREDIENT_KEYWORDS

    def browse(
        self, tag_ids: Sequence[UUID] = (), search: str | None = None
    ) -> list[Recipe]:
        """Return recipes filtered by tags and search text."""
        recipes = self.repository.list_recipes()
        return self.filter(recipes, tag_ids, search)

    def filter(
        self,
        recipes: Sequence[Recipe],
        tag_ids: Sequence[UUID],
        search: str | None,
    ) -> list[Recipe]:
        """Apply tag and search filters to an already loaded recipe list."""
        if not tag_ids:
            return apply_filters(recipes, (), search, ())
        tag_groups = self.tag_repository.list_tag_groups()
        return apply_filters(
            recipes, tag_ids, search, tag_groups, self.ingredient_keywords
        )

    def get_detail(self, slug: str) -> RecipeDetail:
        """Return a recipe with its rich text rendered, or raise NotFoundError."""
        recipe = self.repository.get_by_slug(slug)
        if recipe is None:
            raise NotFoundError(f"Recipe not found: {slug}")
        if recipe.ingredients_structured:
            names = {tag.id: tag.name for tag in recipe.ingredient_tags}
            ingredients = structured_ingredients_document(
                recipe.ingredients_structured, names
            )
        else:
            ingredients = recipe.ingredients_text
        return RecipeDetail(
            recipe=recipe,
            ingredients_html=render_html(ingredients),
            instructions_html=render_html(recipe.instructions),
            inspiration_html=render_html(recipe.inspiration),
            display_tags=self._display_tags(recipe),
        )

    def get(self, recipe_id: UUID) -> Recipe:
        """Return a recipe by id, or raise NotFoundError."""
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe not found")
        return recipe

    def create(self, draft: RecipeDraft, created_by: UUID | None) -> Recipe:
        """Create a recipe and its tag links."""
        slug = _validate_draft(draft)
        payload = _recipe_payload(draft, slug)
        payload["created_by"] = str(created_by) if created_by else None
        recipe_id = self.repository.create_recipe(payload)
        self.repository.link_tags(recipe_id, _unique(draft.tag_ids))
        self.repository.link_ingredients(recipe_id, _unique(draft.ingredient_tag_ids))
        logger.info("Created recipe %s (%s)", draft.name, slug)
        return self.get(recipe_id)

    def update(self, recipe_id: UUID, draft: RecipeDraft) -> Recipe:
        """Update a recipe and replace its tag links."""
        slug = _validate_draft(draft)
        self.get(recipe_id)
        payload = _recipe_payload(draft, slug)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.repository.update_recipe(recipe_id, payload)
        self.repository.clear_links(recipe_id)
        self.repository.link_tags(recipe_id, _unique(draft.tag_ids))
        self.repository.link_ingredients(recipe_id, _unique(draft.ingredient_tag_ids))
        return self.get(recipe_id)

    def delete(self, recipe_id: UUID) -> None:
        """Delete a recipe."""
        self.repository.delete_recipe(recipe_id)

    def upload_image(
        self, filename: str, content: bytes, content_type: str | None = None
    ) -> str:
        """Upload an image under a timestamped name and return its public URL."""
        if not content:
            raise ValidationError("Image file is empty")
        stamp = int(datetime.now(tz=UTC).timestamp() * 1000)
        safe_name = re.sub(r"[^A-Za-z0-9._-]+", "-", filename or "image")
        return self.image_storage.upload(f"{stamp}-{safe_name}", content, content_type)

    def _display_tags(self, recipe: Recipe) -> list[Tag]:
        if not recipe.tags:
            return []
        index = build_group_index(self.tag_repository.list_tag_groups())
        return [
            tag
            for tag in recipe.tags
            if tag.id not in index
            or not is_ingredient_group(index[tag.id], self.ingredient_keywords)
        ]


def generate_slug(name: str) -> str:
    """Build a URL slug from a recipe name."""
    return _SLUG_SEPARATORS.sub("-", name.lower()).strip("-")


def serialize_ingredient_rows(rows: Sequence[IngredientRow]) -> list[dict[str, object]]:
    """Serialize structured ingredient rows to their stored JSON shape."""
    return [
        {
            "quantity": row.quantity,
            "tagId": str(row.tag_id) if row.tag_id else None,
            "notes": row.notes,
        }
        for row in rows
    ]


def _validate_draft(draft: RecipeDraft) -> str:
    if not draft.name or not draft.name.strip():
        raise ValidationError("Name is required")
    slug = (draft.slug or "").strip() or generate_slug(draft.name)
    if not slug:
        raise ValidationError("Slug is required")
    return slug


def _recipe_payload(draft: RecipeDraft, slug: str) -> dict[str, object]:
    return {
        "name": draft.name.strip(),
        "slug": slug,
        "image_url": draft.image_url or None,
        "ingredients_text": ensure_document(draft.ingredients_text),
        "instructions": ensure_document(draft.instructions),
        "inspiration": ensure_document(draft.inspiration),
        "ingredients_structured": serialize_ingredient_rows(
            draft.ingredients_structured
        ),
    }


def _unique(ids: Sequence[UUID]) -> list[UUID]:
    return list(dict.fromkeys(ids))
