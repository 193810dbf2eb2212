"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from recipe_catalog.config import Settings
from recipe_catalog.containers import AppContainer
from recipe_catalog.domain.calendar import CalendarEntry, RecipeSummary
from recipe_catalog.domain.recipes import IngredientRow, Recipe
from recipe_catalog.domain.tags import Tag, TagGroup
from recipe_catalog.domain.users import UserRecord
from recipe_catalog.errors import ConflictError
from recipe_catalog.services.auth import AuthService, UserDirectory
from recipe_catalog.services.calendar import CalendarRepository, CalendarService
from recipe_catalog.services.favorites import FavoriteRepository, FavoriteService
from recipe_catalog.services.importer import ImageFetcher, ImportService
from recipe_catalog.services.recipes import (
    ImageStorage,
    RecipeRepository,
    RecipeService,
)
from recipe_catalog.services.tags import TagRepository, TagService


@dataclass
class InMemoryTagRepository(TagRepository):
    """In-memory tag catalog for tests."""

    groups: dict[UUID, dict[str, object]] = field(default_factory=dict)
    tags: dict[UUID, Tag] = field(default_factory=dict)
    inserts: int = 0

    def list_tag_groups(self) -> list[TagGroup]:
        groups = [self._build(group_id) for group_id in self.groups]
        return sorted(groups, key=lambda group: group.display_order)

    def get_tag_group(self, group_id: UUID) -> TagGroup | None:
        if group_id not in self.groups:
            return None
        return self._build(group_id)

    def find_tag_group(self, name: str) -> TagGroup | None:
        for group_id, row in self.groups.items():
            if row["name"] == name:
                return self._build(group_id)
        return None

    def create_tag_group(
        self, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        if self.find_tag_group(name):
            raise ConflictError(f'Tag group "{name}" already exists')
        group_id = uuid4()
        self.groups[group_id] = {
            "name": name,
            "display_order": display_order,
            "kind": kind,
        }
        self.inserts += 1
        return self._build(group_id)

    def update_tag_group(
        self, group_id: UUID, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        self.groups[group_id] = {
            "name": name,
            "display_order": display_order,
            "kind": kind,
        }
        return self._build(group_id)

    def delete_tag_group(self, group_id: UUID) -> None:
        self.groups.pop(group_id, None)
        for tag_id in [t.id for t in self.tags.values() if t.tag_group_id == group_id]:
            del self.tags[tag_id]

    def find_tag(self, tag_group_id: UUID, name: str) -> Tag | None:
        for tag in self.tags.values():
            if tag.tag_group_id == tag_group_id and tag.name == name:
                return tag
        return None

    def get_tag(self, tag_id: UUID) -> Tag | None:
        return self.tags.get(tag_id)

    def list_tags(self, tag_ids) -> list[Tag]:  # type: ignore[no-untyped-def]
        return [self.tags[tag_id] for tag_id in tag_ids if tag_id in self.tags]

    def create_tag(self, tag_group_id: UUID, name: str) -> Tag:
        if self.find_tag(tag_group_id, name):
            raise ConflictError(f'Tag "{name}" already exists in this group')
        tag = Tag(id=uuid4(), tag_group_id=tag_group_id, name=name)
        self.tags[tag.id] = tag
        self.inserts += 1
        return tag

    def rename_tag(self, tag_id: UUID, name: str) -> Tag:
        current = self.tags[tag_id]
        tag = Tag(id=current.id, tag_group_id=current.tag_group_id, name=name)
        self.tags[tag_id] = tag
        return tag

    def delete_tag(self, tag_id: UUID) -> None:
        self.tags.pop(tag_id, None)

    def _build(self, group_id: UUID) -> TagGroup:
        row = self.groups[group_id]
        tags = [tag for tag in self.tags.values() if tag.tag_group_id == group_id]
        return TagGroup(
            id=group_id,
            name=str(row["name"]),
            display_order=int(row["display_order"]),
            kind=row["kind"],
            tags=sorted(tags, key=lambda tag: tag.name.lower()),
        )


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe store that resolves tags through the tag repository."""

    tag_repository: InMemoryTagRepository
    rows: dict[UUID, dict[str, object]] = field(default_factory=dict)
    tag_links: dict[UUID, list[UUID]] = field(default_factory=dict)
    ingredient_links: dict[UUID, list[UUID]] = field(default_factory=dict)
    inserts: int = 0

    def list_recipes(self) -> list[Recipe]:
        return [self._build(recipe_id) for recipe_id in reversed(self.rows)]

    def list_recipes_by_ids(self, recipe_ids: list[UUID]) -> list[Recipe]:
        return [self._build(rid) for rid in recipe_ids if rid in self.rows]

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        if recipe_id not in self.rows:
            return None
        return self._build(recipe_id)

    def get_by_slug(self, slug: str) -> Recipe | None:
        for recipe_id, row in self.rows.items():
            if row["slug"] == slug:
                return self._build(recipe_id)
        return None

    def create_recipe(self, payload: dict[str, object]) -> UUID:
        if self.get_by_slug(str(payload["slug"])):
            raise ConflictError(f'Recipe slug "{payload["slug"]}" already exists')
        recipe_id = uuid4()
        self.rows[recipe_id] = {
            "created_at": datetime.now(tz=UTC).isoformat(),
            **payload,
        }
        self.tag_links[recipe_id] = []
        self.ingredient_links[recipe_id] = []
        self.inserts += 1
        return recipe_id

    def update_recipe(self, recipe_id: UUID, payload: dict[str, object]) -> None:
        existing = self.get_by_slug(str(payload.get("slug")))
        if existing and existing.id != recipe_id:
            raise ConflictError(f'Recipe slug "{payload["slug"]}" already exists')
        self.rows[recipe_id] = {**self.rows[recipe_id], **payload}

    def delete_recipe(self, recipe_id: UUID) -> None:
        self.rows.pop(recipe_id, None)
        self.tag_links.pop(recipe_id, None)
        self.ingredient_links.pop(recipe_id, None)

    def link_tags(self, recipe_id: UUID, tag_ids: list[UUID]) -> None:
        self.tag_links[recipe_id].extend(tag_ids)

    def link_ingredients(self, recipe_id: UUID, tag_ids: list[UUID]) -> None:
        self.ingredient_links[recipe_id].extend(tag_ids)

    def clear_links(self, recipe_id: UUID) -> None:
        self.tag_links[recipe_id] = []
        self.ingredient_links[recipe_id] = []

    def _build(self, recipe_id: UUID) -> Recipe:
        row = self.rows[recipe_id]
        structured = [
            IngredientRow(
                quantity=str(item.get("quantity") or ""),
                tag_id=UUID(item["tagId"]) if item.get("tagId") else None,
                notes=str(item.get("notes") or ""),
            )
            for item in row.get("ingredients_structured") or []
        ]
        ingredient_ids = dict.fromkeys(
            [
                *self.ingredient_links[recipe_id],
                *(item.tag_id for item in structured if item.tag_id),
            ]
        )
        created_by = row.get("created_by")
        return Recipe(
            id=recipe_id,
            slug=str(row["slug"]),
            name=str(row["name"]),
            image_url=row.get("image_url"),
            ingredients_text=str(row.get("ingredients_text") or ""),
            instructions=str(row.get("instructions") or ""),
            inspiration=str(row.get("inspiration") or ""),
            ingredients_structured=structured,
            created_at=datetime.fromisoformat(str(row["created_at"])),
            created_by=UUID(str(created_by)) if created_by else None,
            tags=self.tag_repository.list_tags(self.tag_links[recipe_id]),
            ingredient_tags=self.tag_repository.list_tags(ingredient_ids),
        )


@dataclass
class InMemoryFavoriteRepository(FavoriteRepository):
    """In-memory favorites for tests."""

    favorites: list[tuple[UUID, UUID]] = field(default_factory=list)

    def is_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        return (user_id, recipe_id) in self.favorites

    def add_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        self.favorites.append((user_id, recipe_id))

    def remove_favorite(self, user_id: UUID, recipe_id: UUID) -> None:
        if (user_id, recipe_id) in self.favorites:
            self.favorites.remove((user_id, recipe_id))

    def list_favorite_ids(self, user_id: UUID) -> list[UUID]:
        return [rid for uid, rid in reversed(self.favorites) if uid == user_id]


@dataclass
class InMemoryCalendarRepository(CalendarRepository):
    """In-memory calendar keyed by user, date and meal slot."""

    recipe_repository: InMemoryRecipeRepository
    entries: dict[UUID, CalendarEntry] = field(default_factory=dict)

    def list_entries(
        self, user_id: UUID, start: date, end: date
    ) -> list[CalendarEntry]:
        return [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id and start <= entry.date <= end
        ]

    def get_entry(self, entry_id: UUID) -> CalendarEntry | None:
        return self.entries.get(entry_id)

    def upsert_entry(
        self,
        user_id: UUID,
        recipe_id: UUID,
        day: date,
        meal_type: str,
        notes: str | None,
    ) -> CalendarEntry:
        entry_id = uuid4()
        for existing in self.entries.values():
            if (existing.user_id, existing.date, existing.meal_type) == (
                user_id,
                day,
                meal_type,
            ):
                entry_id = existing.id
        recipe = self.recipe_repository.get_recipe(recipe_id)
        summary = (
            RecipeSummary(recipe.id, recipe.name, recipe.slug, recipe.image_url)
            if recipe
            else None
        )
        entry = CalendarEntry(
            id=entry_id,
            user_id=user_id,
            recipe_id=recipe_id,
            date=day,
            meal_type=meal_type,
            notes=notes,
            recipe=summary,
        )
        self.entries[entry_id] = entry
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        self.entries.pop(entry_id, None)


@dataclass
class FakeImageStorage(ImageStorage):
    """Records uploads and returns a predictable public URL."""

    uploads: list[tuple[str, bytes, str | None]] = field(default_factory=list)

    def upload(self, path: str, content: bytes, content_type: str | None) -> str:
        self.uploads.append((path, content, content_type))
        return f"https://cdn.example.com/recipe-images/{path}"


@dataclass
class FakeImageFetcher(ImageFetcher):
    """Returns fixed image bytes, or fails for configured URLs."""

    content: bytes = b"fake-image-bytes"
    content_type: str | None = "image/png"
    failing: set[str] = field(default_factory=set)
    fetched: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> tuple[bytes, str | None]:
        self.fetched.append(url)
        if url in self.failing:
            raise RuntimeError(f"download failed: {url}")
        return self.content, self.content_type


@dataclass
class FakeUserDirectory(UserDirectory):
    """Maps fixed access tokens to users."""

    users: dict[str, UserRecord] = field(default_factory=dict)

    def get_user(self, access_token: str) -> UserRecord | None:
        return self.users.get(access_token)


VIEWER = UserRecord(
    id=UUID("00000000-0000-4000-8000-000000000001"),
    email="viewer@example.com",
    role="viewer",
)
CONTRIBUTOR = UserRecord(
    id=UUID("00000000-0000-4000-8000-000000000002"),
    email="contributor@example.com",
    role="contributor",
)
ADMIN = UserRecord(
    id=UUID("00000000-0000-4000-8000-000000000003"),
    email="admin@example.com",
    role="admin",
)

VIEWER_HEADERS = {"Authorization": "Bearer viewer-token"}
CONTRIBUTOR_HEADERS = {"Authorization": "Bearer contributor-token"}


@dataclass
class Catalog:
    """Seeded tag groups, tags and recipes, addressable by name."""

    groups: dict[str, UUID] = field(default_factory=dict)
    tags: dict[str, UUID] = field(default_factory=dict)
    recipes: dict[str, UUID] = field(default_factory=dict)


def seed_catalog(
    tag_repository: InMemoryTagRepository,
    recipe_repository: InMemoryRecipeRepository,
) -> Catalog:
    """Seed cuisines, dish types, proteins and three recipes."""
    catalog = Catalog()
    layout = {
        "Cuisine": ["Thai", "Italian"],
        "Type": ["Stir-fry", "Soup"],
        "Protein": ["Chicken", "Tofu"],
    }
    for order, (group_name, tag_names) in enumerate(layout.items()):
        group = tag_repository.create_tag_group(group_name, order, None)
        catalog.groups[group_name] = group.id
        for tag_name in tag_names:
            catalog.tags[tag_name] = tag_repository.create_tag(group.id, tag_name).id

    recipes = [
        ("Pad Thai", ["Thai", "Stir-fry"], ["Chicken"]),
        ("Minestrone", ["Italian", "Soup"], []),
        ("Tofu Stir-fry", ["Stir-fry"], ["Tofu"]),
    ]
    for name, tag_names, ingredient_names in recipes:
        recipe_id = recipe_repository.create_recipe(
            {
                "slug": name.lower().replace(" ", "-"),
                "name": name,
                "image_url": None,
                "ingredients_text": '{"type":"doc","content":[]}',
                "instructions": '{"type":"doc","content":[]}',
                "inspiration": '{"type":"doc","content":[]}',
                "ingredients_structured": [],
            }
        )
        recipe_repository.link_tags(recipe_id, [catalog.tags[n] for n in tag_names])
        recipe_repository.link_ingredients(
            recipe_id, [catalog.tags[n] for n in ingredient_names]
        )
        catalog.recipes[name] = recipe_id
    return catalog


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        environment="test",
    )


@pytest.fixture
def tag_repository() -> InMemoryTagRepository:
    return InMemoryTagRepository()


@pytest.fixture
def recipe_repository(
    tag_repository: InMemoryTagRepository,
) -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository(tag_repository)


@pytest.fixture
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture
def image_fetcher() -> FakeImageFetcher:
    return FakeImageFetcher()


@pytest.fixture
def recipe_service(
    recipe_repository: InMemoryRecipeRepository,
    tag_repository: InMemoryTagRepository,
    image_storage: FakeImageStorage,
) -> RecipeService:
    return RecipeService(recipe_repository, tag_repository, image_storage)


@pytest.fixture
def import_service(
    tag_repository: InMemoryTagRepository,
    recipe_repository: InMemoryRecipeRepository,
    image_storage: FakeImageStorage,
    image_fetcher: FakeImageFetcher,
) -> ImportService:
    return ImportService(
        tag_repository=tag_repository,
        recipe_repository=recipe_repository,
        image_storage=image_storage,
        image_fetcher=image_fetcher,
    )


@pytest.fixture
def catalog(
    tag_repository: InMemoryTagRepository,
    recipe_repository: InMemoryRecipeRepository,
) -> Catalog:
    return seed_catalog(tag_repository, recipe_repository)


@pytest.fixture
def container(
    settings: Settings,
    tag_repository: InMemoryTagRepository,
    recipe_repository: InMemoryRecipeRepository,
    recipe_service: RecipeService,
    import_service: ImportService,
) -> AppContainer:
    directory = FakeUserDirectory(
        users={
            "viewer-token": VIEWER,
            "contributor-token": CONTRIBUTOR,
            "admin-user-token": ADMIN,
        }
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(directory),
        tag_service=TagService(tag_repository),
        recipe_service=recipe_service,
        favorite_service=FavoriteService(
            InMemoryFavoriteRepository(), recipe_service
        ),
        calendar_service=CalendarService(
            InMemoryCalendarRepository(recipe_repository), recipe_service
        ),
        import_service=import_service,
        close_resources=close_resources,
    )
