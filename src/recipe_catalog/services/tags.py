"""Services for managing tags and tag groups."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from recipe_catalog.domain.tags import GROUP_KINDS, Tag, TagGroup
from recipe_catalog.errors import ConflictError, NotFoundError, ValidationError


class TagRepository(Protocol):
    """Persistence interface for tags and tag groups."""

    def list_tag_groups(self) -> list[TagGroup]:
        """Return groups by display order, each with tags sorted by name."""

    def get_tag_group(self, group_id: UUID) -> TagGroup | None:
        """Return a tag group by id, if present."""

    def find_tag_group(self, name: str) -> TagGroup | None:
        """Return the tag group with this exact name, if present."""

    def create_tag_group(
        self, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        """Create a tag group and return it."""

    def update_tag_group(
        self, group_id: UUID, name: str, display_order: int, kind: str | None
    ) -> TagGroup:
        """Update a tag group and return it."""

    def delete_tag_group(self, group_id: UUID) -> None:
        """Delete a tag group."""

    def find_tag(self, tag_group_id: UUID, name: str) -> Tag | None:
        """Return the tag with this name inside the group, if present."""

    def get_tag(self, tag_id: UUID) -> Tag | None:
        """Return a tag by id, if present."""

    def list_tags(self, tag_ids: Iterable[UUID]) -> list[Tag]:
        """Return the tags for the given ids."""

    def create_tag(self, tag_group_id: UUID, name: str) -> Tag:
        """Create a tag and return it."""

    def rename_tag(self, tag_id: UUID, name: str) -> Tag:
        """Rename a tag and return it."""

    def delete_tag(self, tag_id: UUID) -> None:
        """Delete a tag."""


@dataclass
class TagService:
    """Application service for the tag catalog."""

    repository: TagRepository

    def list_tag_groups(self) -> list[TagGroup]:
        """Return all tag groups with their tags."""
        return self.repository.list_tag_groups()

    def create_tag_group(
        self, name: str, display_order: int = 0, kind: str | None = None
    ) -> TagGroup:
        """Create a tag group after validating its fields."""
        cleaned = _require_name(name)
        _validate_group_fields(display_order, kind)
        if self.repository.find_tag_group(cleaned):
            raise ConflictError(f'Tag group "{cleaned}" already exists')
        return self.repository.create_tag_group(cleaned, display_order, kind)

    def update_tag_group(
        self,
        group_id: UUID,
        name: str,
        display_order: int = 0,
        kind: str | None = None,
    ) -> TagGroup:
        """Update a tag group's name, order and kind."""
        cleaned = _require_name(name)
        _validate_group_fields(display_order, kind)
        if self.repository.get_tag_group(group_id) is None:
            raise NotFoundError("Tag group not found")
        existing = self.repository.find_tag_group(cleaned)
        if existing and existing.id != group_id:
            raise ConflictError(f'Tag group "{cleaned}" already exists')
        return self.repository.update_tag_group(group_id, cleaned, display_order, kind)

    def delete_tag_group(self, group_id: UUID) -> None:
        """Delete a tag group."""
        self.repository.delete_tag_group(group_id)

    def create_tag(self, tag_group_id: UUID, name: str) -> Tag:
        """Create a tag inside an existing group."""
        cleaned = _require_name(name)
        if self.repository.get_tag_group(tag_group_id) is None:
            raise NotFoundError("Tag group not found")
        if self.repository.find_tag(tag_group_id, cleaned):
            raise ConflictError(f'Tag "{cleaned}" already exists in this group')
        return self.repository.create_tag(tag_group_id, cleaned)

    def rename_tag(self, tag_id: UUID, name: str) -> Tag:
        """Rename a tag; its group never changes."""
        cleaned = _require_name(name)
        current = self.repository.get_tag(tag_id)
        if current is None:
            raise NotFoundError("Tag not found")
        existing = self.repository.find_tag(current.tag_group_id, cleaned)
        if existing and existing.id != tag_id:
            raise ConflictError(f'Tag "{cleaned}" already exists in this group')
        return self.repository.rename_tag(tag_id, cleaned)

    def delete_tag(self, tag_id: UUID) -> None:
        """Delete a tag."""
        self.repository.delete_tag(tag_id)


def _require_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required")
    return cleaned


def _validate_group_fields(display_order: int, kind: str | None) -> None:
    if display_order < 0:
        raise ValidationError("Display order must be zero or greater")
    if kind is not None and kind not in GROUP_KINDS:
        raise ValidationError(f"Unknown tag group kind: {kind}")
