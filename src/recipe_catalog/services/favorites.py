"""Favorite recipes service."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from recipe_catalog.domain.recipes import Recipe
from recipe_catalog.services.recipes import RecipeService


class FavoriteRepository(Protocol):
    """Persistence interface for user favorites."""

    def is_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Return true when the user favorited the recipe."""

    def add_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        """Mark a recipe as favorite."""

    def remove_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        """Remove a recipe from favorites."""

    def list_favorite_ids(self, user_id: UUID) -> list[UUID]:
        """Return favorited recipe ids, most recently added first."""


@dataclass
class FavoriteService:
    """Service for a user's favorite recipes."""

    repository: FavoriteRepository
    recipe_service: RecipeService

    def is_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Return whether the recipe is a favorite."""
        return self.repository.is_favorite(user_id, recipe_id)

    def add(self, user_id: UUID, recipe_id: UUID) -> None:
        """Favorite a recipe; adding twice is a no-op."""
        self.recipe_service.get(recipe_id)
        if not self.repository.is_favorite(user_id, recipe_id):
            self.repository.add_favorite(user_id, recipe_id)

    def remove(self, user_id: UUID, recipe_id: UUID) -> None:
        """Unfavorite a recipe."""
        self.repository.remove_favorite(user_id, recipe_id)

    def toggle(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Flip the favorite state and return the new state."""
        if self.repository.is_favorite(user_id, recipe_id):
            self.remove(user_id, recipe_id)
            return False
        self.add(user_id, recipe_id)
        return True

    def list_favorites(
        self,
        user_id: UUID,
        tag_ids: Sequence[UUID] = (),
        search: str | None = None,
    ) -> list[Recipe]:
        """Return favorited recipes filtered like the main catalog."""
        recipe_ids = self.repository.list_favorite_ids(user_id)
        if not recipe_ids:
            return []
        recipes = self.recipe_service.repository.list_recipes_by_ids(recipe_ids)
        return self.recipe_service.filter(recipes, tag_ids, search)
