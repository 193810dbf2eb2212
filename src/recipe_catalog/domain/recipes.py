"""Domain models for recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from recipe_catalog.domain.tags import Tag


@dataclass(frozen=True)
class IngredientRow:
    """One structured ingredient line."""

    quantity: str = ""
    tag_id: UUID | None = None
    notes: str = ""


@dataclass(frozen=True)
class Recipe:
    """Recipe row with its general and ingredient tags resolved."""

    id: UUID
    slug: str
    name: str
    image_url: str | None
    ingredients_text: str
    instructions: str
    inspiration: str
    ingredients_structured: list[IngredientRow] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: UUID | None = None
    tags: list[Tag] = field(default_factory=list)
    ingredient_tags: list[Tag] = field(default_factory=list)

    @property
    def tag_ids(self) -> set[UUID]:
        """Ids of the general tags on this recipe."""
        return {tag.id for tag in self.tags}

    @property
    def ingredient_tag_ids(self) -> set[UUID]:
        """Ids of the ingredient tags on this recipe."""
        return {tag.id for tag in self.ingredient_tags}

    def structured_tag_ids(self) -> list[UUID]:
        """Tag ids referenced by structured ingredient rows, in row order."""
        return [row.tag_id for row in self.ingredients_structured if row.tag_id]


@dataclass(frozen=True)
class RecipeDraft:
    """Editable recipe fields submitted by a contributor."""

    name: str
    slug: str
    image_url: str | None
    ingredients_text: str
    instructions: str
    inspiration: str
    tag_ids: list[UUID] = field(default_factory=list)
    ingredient_tag_ids: list[UUID] = field(default_factory=list)
    ingredients_structured: list[IngredientRow] = field(default_factory=list)


@dataclass(frozen=True)
class RecipeDetail:
    """Recipe with its rich-text fields rendered for display."""

    recipe: Recipe
    ingredients_html: str
    instructions_html: str
    inspiration_html: str
    display_tags: list[Tag]
