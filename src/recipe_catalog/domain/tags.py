"""Domain models for tags and tag groups."""

from dataclasses import dataclass, field
from uuid import UUID

RECIPE_GROUP = "recipe"
INGREDIENT_GROUP = "ingredient"
GROUP_KINDS = (RECIPE_GROUP, INGREDIENT_GROUP)


@dataclass(frozen=True)
class Tag:
    """A tag that belongs to exactly one tag group."""

    id: UUID
    tag_group_id: UUID
    name: str


@dataclass(frozen=True)
class TagGroup:
    """Named category of tags, ordered by display_order."""

    id: UUID
    name: str
    display_order: int
    kind: str | None = None
    tags: list[Tag] = field(default_factory=list)
