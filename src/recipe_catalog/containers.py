"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from recipe_catalog.adapters.image_fetcher import HttpxImageFetcher
from recipe_catalog.adapters.supabase_calendar_repository import (
    SupabaseCalendarRepository,
)
from recipe_catalog.adapters.supabase_favorite_repository import (
    SupabaseFavoriteRepository,
)
from recipe_catalog.adapters.supabase_image_storage import SupabaseImageStorage
from recipe_catalog.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from recipe_catalog.adapters.supabase_tag_repository import SupabaseTagRepository
from recipe_catalog.adapters.supabase_user_directory import SupabaseUserDirectory
from recipe_catalog.config import Settings, parse_keywords
from recipe_catalog.services.auth import AuthService
from recipe_catalog.services.calendar import CalendarService
from recipe_catalog.services.favorites import FavoriteService
from recipe_catalog.services.importer import ImportService
from recipe_catalog.services.recipes import RecipeService
from recipe_catalog.services.tags import TagService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    tag_service: TagService
    recipe_service: RecipeService
    favorite_service: FavoriteService
    calendar_service: CalendarService
    import_service: ImportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    tag_repository = SupabaseTagRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    image_storage = SupabaseImageStorage(
        supabase_client, resolved_settings.image_bucket
    )
    image_fetcher = HttpxImageFetcher.create()
    recipe_service = RecipeService(
        repository=recipe_repository,
        tag_repository=tag_repository,
        image_storage=image_storage,
        ingredient_keywords=parse_keywords(resolved_settings.ingredient_group_keywords),
    )
    import_service = ImportService(
        tag_repository=tag_repository,
        recipe_repository=recipe_repository,
        image_storage=image_storage,
        image_fetcher=image_fetcher,
    )

    async def close_resources() -> None:
        await image_fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(SupabaseUserDirectory(supabase_client)),
        tag_service=TagService(tag_repository),
        recipe_service=recipe_service,
        favorite_service=FavoriteService(
            SupabaseFavoriteRepository(supabase_client), recipe_service
        ),
        calendar_service=CalendarService(
            SupabaseCalendarRepository(supabase_client), recipe_service
        ),
        import_service=import_service,
        close_resources=close_resources,
    )
