"""Tag classification and recipe filtering."""

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from recipe_catalog.domain.recipes import Recipe
from recipe_catalog.domain.tags import INGREDIENT_GROUP, RECIPE_GROUP, TagGroup

INGREDIENT_KEYWORDS = ("ingredient", "protein", "veggie", "carb", "dairy")


@dataclass(frozen=True)
class TagPartition:
    """Selected tag ids split into recipe-level and ingredient-level ids."""

    recipe_tag_ids: list[UUID] = field(default_factory=list)
    ingredient_tag_ids: list[UUID] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return true when no known tag is selected."""
        return not self.recipe_tag_ids and not self.ingredient_tag_ids


def build_group_index(tag_groups: Iterable[TagGroup]) -> dict[UUID, TagGroup]:
    """Map each tag id to its owning group."""
    index: dict[UUID, TagGroup] = {}
    for group in tag_groups:
        for tag in group.tags:
            index[tag.id] = group
    return index


def is_ingredient_group(
    group: TagGroup, keywords: Sequence[str] = INGREDIENT_KEYWORDS
) -> bool:
    """Return true when the group holds ingredient tags.

    An explicit ``kind`` wins; otherwise the group name is matched against
    the keyword list.
    """
    if group.kind == INGREDIENT_GROUP:
        return True
    if group.kind == RECIPE_GROUP:
        return False
    name = group.name.lower()
    return any(keyword in name for keyword in keywords)


def ingredient_usage(recipes: Iterable[Recipe]) -> set[UUID]:
    """Collect every tag id used as an ingredient across recipes."""
    used: set[UUID] = set()
    for recipe in recipes:
        used.update(recipe.ingredient_tag_ids)
        used.update(recipe.structured_tag_ids())
    return used


def partition_tag_ids(
    selected: Iterable[UUID],
    tag_groups: Iterable[TagGroup],
    used_as_ingredient: Collection[UUID] = frozenset(),
    keywords: Sequence[str] = INGREDIENT_KEYWORDS,
) -> TagPartition:
    """Split selected tag ids into recipe and ingredient categories.

    Ids that belong to no group and are never used as an ingredient are
    dropped.
    """
    index = build_group_index(tag_groups)
    recipe_ids: list[UUID] = []
    ingredient_ids: list[UUID] = []
    for tag_id in selected:
        group = index.get(tag_id)
        if tag_id in used_as_ingredient or (
            group is not None and is_ingredient_group(group, keywords)
        ):
            target = ingredient_ids
        elif group is None:
            continue
        else:
            target = recipe_ids
        if tag_id not in target:
            target.append(tag_id)
    return TagPartition(recipe_tag_ids=recipe_ids, ingredient_tag_ids=ingredient_ids)


def recipe_matches(recipe: Recipe, partition: TagPartition) -> bool:
    """OR within each category, AND between categories."""
    if partition.recipe_tag_ids:
        own = recipe.tag_ids
        if not any(tag_id in own for tag_id in partition.recipe_tag_ids):
            return False
    if partition.ingredient_tag_ids:
        own = recipe.ingredient_tag_ids | set(recipe.structured_tag_ids())
        if not any(tag_id in own for tag_id in partition.ingredient_tag_ids):
            return False
    return True


def filter_recipes(recipes: Iterable[Recipe], partition: TagPartition) -> list[Recipe]:
    """Return recipes matching the partition, preserving input order."""
    return [recipe for recipe in recipes if recipe_matches(recipe, partition)]


def matches_search(recipe: Recipe, search: str | None) -> bool:
    """Case-insensitive substring match on name, tag and ingredient names."""
    if not search:
        return True
    needle = search.lower()
    if needle in recipe.name.lower():
        return True
    if any(needle in tag.name.lower() for tag in recipe.tags):
        return True
    return any(needle in tag.name.lower() for tag in recipe.ingredient_tags)


def apply_filters(
    recipes: Sequence[Recipe],
    tag_ids: Sequence[UUID],
    search: str | None,
    tag_groups: Sequence[TagGroup],
    keywords: Sequence[str] = INGREDIENT_KEYWORDS,
) -> list[Recipe]:
    """Apply the search predicate, then the tag filter."""
    results = [recipe for recipe in recipes if matches_search(recipe, search)]
    if not tag_ids:
        return results
    partition = partition_tag_ids(
        tag_ids, tag_groups, ingredient_usage(results), keywords
    )
    if partition.is_empty:
        return results
    return filter_recipes(results, partition)
