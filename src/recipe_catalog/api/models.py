"""Request bodies accepted by the HTTP API."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from recipe_catalog.domain.recipes import IngredientRow, RecipeDraft


class IngredientRowBody(BaseModel):
    """One structured ingredient line as sent by the recipe form."""

    model_config = ConfigDict(populate_by_name=True)

    quantity: str = ""
    tag_id: UUID | None = Field(default=None, alias="tagId")
    notes: str = ""


class RecipeBody(BaseModel):
    """Create or update payload for a recipe."""

    name: str
    slug: str = ""
    image_url: str | None = None
    ingredients_text: str = ""
    instructions: str = ""
    inspiration: str = ""
    tag_ids: list[UUID] = Field(default_factory=list)
    ingredient_tag_ids: list[UUID] = Field(default_factory=list)
    ingredients_structured: list[IngredientRowBody] = Field(default_factory=list)

    def to_draft(self) -> RecipeDraft:
        return RecipeDraft(
            name=self.name,
            slug=self.slug,
            image_url=self.image_url,
            ingredients_text=self.ingredients_text,
            instructions=self.instructions,
            inspiration=self.inspiration,
            tag_ids=list(self.tag_ids),
            ingredient_tag_ids=list(self.ingredient_tag_ids),
            ingredients_structured=[
                IngredientRow(quantity=row.quantity, tag_id=row.tag_id, notes=row.notes)
                for row in self.ingredients_structured
            ],
        )


class TagGroupBody(BaseModel):
    name: str
    display_order: int = 0
    kind: str | None = None


class TagBody(BaseModel):
    name: str
    tag_group_id: UUID


class TagRenameBody(BaseModel):
    name: str


class CalendarEntryBody(BaseModel):
    """Schedules a recipe; a missing field is reported as a validation error."""

    model_config = ConfigDict(populate_by_name=True)

    recipe_id: UUID | None = None
    day: date | None = Field(default=None, alias="date")
    meal_type: str | None = None
    notes: str | None = None
