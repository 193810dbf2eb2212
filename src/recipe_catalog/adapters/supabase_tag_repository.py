"""Supabase repository for tags and tag groups."""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from supabase import Client, PostgrestAPIError

from recipe_catalog.adapters.supabase_errors import translate_api_error
from recipe_catalog.domain.tags import Tag, TagGroup
from recipe_catalog.errors import StorageError
from recipe_catalog.services.tags import TagRepository


@dataclass
class SupabaseTagRepository(TagRepository):
    """Supabase-backed tag catalog."""

    client: Client

    def list_tag_groups(self) -> list[TagGroup]:
        """Return groups by display order, each with tags sorted by name."""
        response = (
            self.client.table("tag_groups")
            .select("*, tags(*)")
            .order("display_order")
            .execute()
        )
        return [_parse_group(row) for row in response.data or []]

    def get_tag_group(self, group_id: UUID) -> TagGroup | None:
        """Return a tag group by id, if present."""
        response = (
            self.client.table("tag_groups")
            .select("*, tags(*)")
            .eq("id", str(group_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_group(response.data[0])

    def find_tag_group(self, name: str) -> TagGroup | None:
        """Return the tag group with this exact name, if present."""
        response = (
            self.client.table("tag_groups")
            .select("*")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_group(response.data[0])

    def create_tag_group(
        self, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        """Create a tag group and return it."""
        try:
            response = (
                self.client.table("tag_groups")
                .insert({"name": name, "display_order": display_order, "kind": kind})
                .execute()
            )
        except PostgrestAPIError as exc:
            message = f'Tag group "{name}" already exists'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to create tag group")
        return _parse_group(response.data[0])

    def update_tag_group(
        self, group_id: UUID, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        """Update a tag group and return it."""
        try:
            response = (
                self.client.table("tag_groups")
                .update({"name": name, "display_order": display_order, "kind": kind})
                .eq("id", str(group_id))
                .execute()
            )
        except PostgrestAPIError as exc:
            message = f'Tag group "{name}" already exists'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to update tag group")
        return _parse_group(response.data[0])

    def delete_tag_group(self, group_id: UUID) -> None:
        """Delete a tag group."""
        self.client.table("tag_groups").delete().eq("id", str(group_id)).execute()

    def find_tag(self, tag_group_id: UUID, name: str) -> Tag | None:
        """Return the tag with this name inside the group, if present."""
        response = (
            self.client.table("tags")
            .select("*")
            .eq("tag_group_id", str(tag_group_id))
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_tag(response.data[0])

    def get_tag(self, tag_id: UUID) -> Tag | None:
        """Return a tag by id, if present."""
        response = (
            self.client.table("tags")
            .select("*")
            .eq("id", str(tag_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_tag(response.data[0])

    def list_tags(self, tag_ids: Iterable[UUID]) -> list[Tag]:
        """Return the tags for the given ids."""
        ids = [str(tag_id) for tag_id in dict.fromkeys(tag_ids)]
        if not ids:
            return []
        response = self.client.table("tags").select("*").in_("id", ids).execute()
        return [parse_tag(row) for row in response.data or []]

    def create_tag(self, tag_group_id: UUID, name: str) -> Tag:
        """Create a tag and return it."""
        try:
            response = (
                self.client.table("tags")
                .insert({"tag_group_id": str(tag_group_id), "name": name})
                .execute()
            )
        except PostgrestAPIError as exc:
            message = f'Tag "{name}" already exists in this group'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to create tag")
        return parse_tag(response.data[0])

    def rename_tag(self, tag_id: UUID, name: str) -> Tag:
        """Rename a tag and return it."""
        try:
            response = (
                self.client.table("tags")
                .update({"name": name})
                .eq("id", str(tag_id))
                .execute()
            )
        except PostgrestAPIError as exc:
            message = f'Tag "{name}" already exists in this group'
            raise translate_api_error(exc, message) from exc
        if not response.data:
            raise StorageError("Failed to rename tag")
        return parse_tag(response.data[0])

    def delete_tag(self, tag_id: UUID) -> None:
        """Delete a tag."""
        self.client.table("tags").delete().eq("id", str(tag_id)).execute()


def parse_tag(row: dict[str, object]) -> Tag:
    """Parse a tags row into a domain model."""
    return Tag(
        id=UUID(str(row["id"])),
        tag_group_id=UUID(str(row["tag_group_id"])),
        name=str(row["name"]),
    )


def _parse_group(row: dict[str, object]) -> TagGroup:
    tags = [parse_tag(tag) for tag in row.get("tags") or []]
    return TagGroup(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        display_order=int(row.get("display_order") or 0),
        kind=row.get("kind"),
        tags=sorted(tags, key=lambda tag: tag.name.lower()),
    )

