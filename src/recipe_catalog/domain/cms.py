"""Models for external CMS export payloads."""

from pydantic import BaseModel, ConfigDict, Field


class CmsTagGroup(BaseModel):
    """Tag group record from a CMS export."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    display_order: int = Field(default=0, alias="displayOrder")

    @property
    def key(self) -> str:
        """Identifier other records use to reference this group."""
        return self.id or self.name


class CmsTag(BaseModel):
    """Tag record from a CMS export."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    tag_group: str = Field(alias="tagGroup")

    @property
    def key(self) -> str:
        """Identifier other records use to reference this tag."""
        return self.id or self.name


class CmsRecipe(BaseModel):
    """Recipe record from a CMS export."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    slug: str | None = None
    image: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    tags: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    ingredients_text: str | None = Field(default=None, alias="ingredientsText")
    instructions: str | None = None
    inspiration: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class CmsExport(BaseModel):
    """Full CMS export with recipes, tags and tag groups."""

    model_config = ConfigDict(populate_by_name=True)

    recipes: list[CmsRecipe]
    tags: list[CmsTag]
    tag_groups: list[CmsTagGroup] = Field(alias="tagGroups")
