"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import date
from types import SimpleNamespace
from uuid import uuid4

import pytest
from supabase import PostgrestAPIError, StorageException

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
from recipe_catalog.errors import ConflictError, StorageError


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "update": [],
            "upsert": [],
            "delete": [],
        }
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_on_conflict: str | None = None
    last_order: tuple[str, bool] | None = None
    error: Exception | None = None
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def upsert(  # type: ignore[no-untyped-def]
        self, payload, on_conflict: str = ""
    ) -> "FakeTable":
        self._action = "upsert"
        self.last_payload = payload
        self.last_on_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def lte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        if self.error is not None:
            raise self.error
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeBucket:
    name: str
    uploads: list[tuple[str, bytes, dict[str, str]]] = field(default_factory=list)
    error: Exception | None = None

    def upload(self, path: str, content: bytes, file_options: dict[str, str]) -> None:
        if self.error is not None:
            raise self.error
        self.uploads.append((path, content, file_options))

    def get_public_url(self, path: str) -> str:
        base = "https://example.supabase.co/storage/v1/object/public"
        return f"{base}/{self.name}/{path}"


@dataclass
class FakeStorage:
    buckets: dict[str, FakeBucket] = field(default_factory=dict)

    def from_(self, name: str) -> FakeBucket:
        if name not in self.buckets:
            self.buckets[name] = FakeBucket(name=name)
        return self.buckets[name]


@dataclass
class FakeAuth:
    users: dict[str, object] = field(default_factory=dict)

    def get_user(self, access_token: str):  # type: ignore[no-untyped-def]
        return SimpleNamespace(user=self.users.get(access_token))


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    storage: FakeStorage = field(default_factory=FakeStorage)
    auth: FakeAuth = field(default_factory=FakeAuth)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _unique_violation() -> PostgrestAPIError:
    return PostgrestAPIError(
        {"code": "23505", "message": "duplicate key", "details": "", "hint": ""}
    )


def _tag_row(tag_id: str, group_id: str, name: str) -> dict[str, object]:
    return {"id": tag_id, "tag_group_id": group_id, "name": name}


def test_tag_repository_lists_groups_with_sorted_tags() -> None:
    client = FakeSupabaseClient()
    group_id = str(uuid4())
    client.table("tag_groups").queue(
        "select",
        [
            {
                "id": group_id,
                "name": "Cuisine",
                "display_order": 1,
                "kind": None,
                "tags": [
                    _tag_row(str(uuid4()), group_id, "thai"),
                    _tag_row(str(uuid4()), group_id, "Italian"),
                ],
            }
        ],
    )

    groups = SupabaseTagRepository(client).list_tag_groups()

    assert [tag.name for tag in groups[0].tags] == ["Italian", "thai"]
    assert groups[0].display_order == 1
    assert client.table("tag_groups").last_order == ("display_order", False)


def test_tag_repository_create_group_translates_unique_violation() -> None:
    client = FakeSupabaseClient()
    client.table("tag_groups").error = _unique_violation()

    with pytest.raises(ConflictError):
        SupabaseTagRepository(client).create_tag_group("Cuisine", 1, None)


def test_tag_repository_create_tag_without_returned_row() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(StorageError):
        SupabaseTagRepository(client).create_tag(uuid4(), "Thai")


def test_tag_repository_find_tag_filters_by_group_and_name() -> None:
    client = FakeSupabaseClient()
    group_id = uuid4()
    tag_id = str(uuid4())
    tags_table = client.table("tags")
    tags_table.queue("select", [_tag_row(tag_id, str(group_id), "Thai")])

    tag = SupabaseTagRepository(client).find_tag(group_id, "Thai")

    assert tag is not None
    assert str(tag.id) == tag_id
    assert tags_table.last_filters == [
        ("tag_group_id", str(group_id)),
        ("name", "Thai"),
    ]


def test_recipe_repository_parses_joined_and_structured_tags() -> None:
    client = FakeSupabaseClient()
    group_id = str(uuid4())
    thai_id = str(uuid4())
    chicken_id = str(uuid4())
    lime_id = str(uuid4())
    client.table("recipes").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "slug": "pad-thai",
                "name": "Pad Thai",
                "image_url": None,
                "ingredients_text": None,
                "instructions": "Fry",
                "inspiration": None,
                "ingredients_structured": [
                    {"quantity": "200 g", "tagId": chicken_id, "notes": ""},
                    {"quantity": "1", "tagId": lime_id, "notes": "juiced"},
                ],
                "created_at": "2024-05-01T10:00:00+00:00",
                "updated_at": None,
                "created_by": None,
                "recipe_tags": [{"tag": _tag_row(thai_id, group_id, "Thai")}],
                "recipe_ingredients": [
                    {"tag": _tag_row(chicken_id, group_id, "Chicken")}
                ],
            }
        ],
    )
    client.table("tags").queue("select", [_tag_row(lime_id, group_id, "Lime")])

    recipe = SupabaseRecipeRepository(client).get_by_slug("pad-thai")

    assert recipe is not None
    assert [tag.name for tag in recipe.tags] == ["Thai"]
    assert [tag.name for tag in recipe.ingredient_tags] == ["Chicken", "Lime"]
    assert recipe.ingredients_structured[1].notes == "juiced"
    assert recipe.ingredients_text == ""
    assert recipe.created_at is not None
    assert client.table("tags").last_filters == [("id", [lime_id])]


def test_recipe_repository_skips_malformed_structured_tag_ids() -> None:
    client = FakeSupabaseClient()
    group_id = str(uuid4())
    chicken_id = str(uuid4())
    client.table("recipes").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "slug": "larb",
                "name": "Larb",
                "ingredients_structured": [
                    {"quantity": "1", "tagId": "not-a-uuid", "notes": ""},
                    {"quantity": "300 g", "tagId": chicken_id, "notes": ""},
                    {"quantity": "", "tagId": None, "notes": "mint"},
                ],
                "recipe_tags": [],
                "recipe_ingredients": [
                    {"tag": _tag_row(chicken_id, group_id, "Chicken")}
                ],
            }
        ],
    )

    recipe = SupabaseRecipeRepository(client).get_by_slug("larb")

    assert recipe is not None
    assert [row.quantity for row in recipe.ingredients_structured] == ["300 g", ""]
    assert [tag.name for tag in recipe.ingredient_tags] == ["Chicken"]


def test_recipe_repository_keeps_requested_order() -> None:
    client = FakeSupabaseClient()
    first, second = uuid4(), uuid4()

    def row(recipe_id, slug):  # type: ignore[no-untyped-def]
        return {
            "id": str(recipe_id),
            "slug": slug,
            "name": slug,
            "instructions": "",
        }

    client.table("recipes").queue("select", [row(first, "a"), row(second, "b")])

    recipes = SupabaseRecipeRepository(client).list_recipes_by_ids([second, first])

    assert [recipe.slug for recipe in recipes] == ["b", "a"]


def test_recipe_repository_create_and_link() -> None:
    client = FakeSupabaseClient()
    recipe_id = str(uuid4())
    tag_id = uuid4()
    client.table("recipes").queue("insert", [{"id": recipe_id}])
    repository = SupabaseRecipeRepository(client)

    created = repository.create_recipe({"slug": "pad-thai", "name": "Pad Thai"})
    repository.link_tags(created, [tag_id])
    repository.link_ingredients(created, [])

    assert str(created) == recipe_id
    assert client.table("recipe_tags").last_payload == [
        {"recipe_id": recipe_id, "tag_id": str(tag_id)}
    ]
    assert client.table("recipe_ingredients").actions == []


def test_recipe_repository_duplicate_slug_is_conflict() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").error = _unique_violation()

    with pytest.raises(ConflictError):
        SupabaseRecipeRepository(client).create_recipe({"slug": "pad-thai"})


def test_recipe_repository_clear_links_deletes_both_tables() -> None:
    client = FakeSupabaseClient()

    SupabaseRecipeRepository(client).clear_links(uuid4())

    assert client.table("recipe_tags").actions == ["delete"]
    assert client.table("recipe_ingredients").actions == ["delete"]


def test_favorite_repository() -> None:
    client = FakeSupabaseClient()
    favorites_table = client.table("user_favorites")
    recipe_id = uuid4()
    favorites_table.queue("select", [{"recipe_id": str(recipe_id)}])
    favorites_table.queue("select", [{"recipe_id": str(recipe_id)}])
    repository = SupabaseFavoriteRepository(client)

    assert repository.is_favorite(uuid4(), recipe_id) is True
    assert repository.list_favorite_ids(uuid4()) == [recipe_id]
    assert repository.is_favorite(uuid4(), recipe_id) is False
    assert favorites_table.last_order == ("created_at", True)


def test_calendar_repository_upserts_on_meal_slot() -> None:
    client = FakeSupabaseClient()
    entries_table = client.table("calendar_entries")
    entry_id = str(uuid4())
    user_id = uuid4()
    recipe_id = uuid4()
    row = {
        "id": entry_id,
        "user_id": str(user_id),
        "recipe_id": str(recipe_id),
        "date": "2024-05-01",
        "meal_type": "dinner",
        "notes": None,
    }
    entries_table.queue("upsert", [row])
    entries_table.queue(
        "select",
        [
            {
                **row,
                "recipe": {
                    "id": str(recipe_id),
                    "name": "Pad Thai",
                    "slug": "pad-thai",
                    "image_url": None,
                },
            }
        ],
    )

    entry = SupabaseCalendarRepository(client).upsert_entry(
        user_id, recipe_id, date(2024, 5, 1), "dinner", None
    )

    assert entries_table.last_on_conflict == "user_id,date,meal_type"
    assert entry.date == date(2024, 5, 1)
    assert entry.recipe is not None
    assert entry.recipe.slug == "pad-thai"


def test_calendar_repository_lists_range() -> None:
    client = FakeSupabaseClient()
    entries_table = client.table("calendar_entries")
    user_id = uuid4()

    entries = SupabaseCalendarRepository(client).list_entries(
        user_id, date(2024, 4, 28), date(2024, 6, 1)
    )

    assert entries == []
    assert entries_table.last_filters == [
        ("user_id", str(user_id)),
        ("date", "2024-04-28"),
        ("date", "2024-06-01"),
    ]


def test_image_storage_uploads_and_returns_public_url() -> None:
    client = FakeSupabaseClient()

    url = SupabaseImageStorage(client, "recipe-images").upload(
        "pad-thai.png", b"bytes", "image/png"
    )

    bucket = client.storage.buckets["recipe-images"]
    assert bucket.uploads == [
        ("pad-thai.png", b"bytes", {"content-type": "image/png", "upsert": "true"})
    ]
    assert url.endswith("/recipe-images/pad-thai.png")


def test_image_storage_wraps_storage_errors() -> None:
    client = FakeSupabaseClient()
    client.storage.from_("recipe-images").error = StorageException("quota")

    with pytest.raises(StorageError):
        SupabaseImageStorage(client, "recipe-images").upload("a.jpg", b"x", None)


def test_user_directory_reads_role_from_metadata() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    client.auth.users["token"] = SimpleNamespace(
        id=str(user_id), email="cook@example.com", user_metadata={"role": "admin"}
    )
    client.auth.users["odd-role"] = SimpleNamespace(
        id=str(uuid4()), email=None, user_metadata={"role": "owner"}
    )
    directory = SupabaseUserDirectory(client)

    user = directory.get_user("token")
    odd = directory.get_user("odd-role")

    assert user is not None
    assert user.id == user_id
    assert user.role == "admin"
    assert odd is not None
    assert odd.role == "viewer"
    assert directory.get_user("unknown") is None
