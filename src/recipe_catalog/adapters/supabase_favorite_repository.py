"""Supabase repository for user favorites."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from recipe_catalog.services.favorites import FavoriteRepository


@dataclass
class SupabaseFavoriteRepository(FavoriteRepository):
    """Supabase-backed favorites keyed by user and recipe."""

    client: Client

    def is_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Return true when the user favorited the recipe."""
        response = (
            self.client.table("user_favorites")
            .select("recipe_id")
            .eq("user_id", str(user_id))
            .eq("recipe_id", str(recipe_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def add_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        """Mark a recipe as favorite."""
        self.client.table("user_favorites").insert(
            {"user_id": str(user_id), "recipe_id": str(recipe_id)}
        ).execute()

    def remove_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        """Remove a recipe from favorites."""
        self.client.table("user_favorites").delete().eq("user_id", str(user_id)).eq(
            "recipe_id", str(recipe_id)
        ).execute()

    def list_favorite_ids(self, user_id: UUID) -> list[UUID]:
        """Return favorited recipe ids, most recently added first."""
        response = (
            self.client.table("user_favorites")
            .select("recipe_id")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [UUID(str(row["recipe_id"])) for row in response.data or []]
