"""Bulk importers for tag groups, tags and recipes.

Imports run front to back in foreign-key order: tag groups, then tags, then
recipes. Each record is checked against existing rows by its natural key and
skipped when present, so re-running an import performs no inserts. A failing
record is logged and skipped; there is no transaction across records.
"""

import csv
import io
import logging
import re
import unicodedata
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit
from uuid import UUID

from recipe_catalog.domain.cms import CmsExport, CmsRecipe
from recipe_catalog.domain.imports import (
    ImageMigrationResult,
    ImportSummary,
    RecipeImportResult,
)
from recipe_catalog.domain.recipes import IngredientRow
from recipe_catalog.errors import ConflictError
from recipe_catalog.services.documents import ensure_document
from recipe_catalog.services.recipes import (
    ImageStorage,
    RecipeRepository,
    generate_slug,
    serialize_ingredient_rows,
)
from recipe_catalog.services.tags import TagRepository

logger = logging.getLogger(__name__)

CsvRecord = Mapping[str, str | None]

_IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)
_HOSTED_IMAGE_MARKERS = ("supabase.co", "supabase.storage")


class ImageFetcher(Protocol):
    """Interface for downloading remote images."""

    async def fetch(self, url: str) -> tuple[bytes, str | None]:
        """Download an image and return its bytes and content type."""


def read_csv_records(text: str) -> list[dict[str, str]]:
    """Parse header-keyed CSV text, skipping blank lines."""
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    records = []
    for row in reader:
        cleaned = {
            (key or "").strip(): (value or "")
            for key, value in row.items()
            if key is not None
        }
        if any(value.strip() for value in cleaned.values()):
            records.append(cleaned)
    return records


def split_names(raw: str | None) -> list[str]:
    """Split a comma-joined list of names."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def image_extension(url: str) -> str:
    """Pick a file extension from the URL path, defaulting to jpg."""
    match = _IMAGE_EXTENSION.search(urlsplit(url).path)
    return match.group(1).lower() if match else "jpg"


def image_file_name(slug: str, extension: str) -> str:
    """Build a storage-safe file name from a recipe slug."""
    decomposed = unicodedata.normalize("NFD", slug)
    ascii_only = "".join(c for c in decomposed if not unicodedata.combining(c))
    sanitized = re.sub(r"[^a-z0-9-]+", "-", ascii_only, flags=re.IGNORECASE)
    sanitized = re.sub(r"-+", "-", sanitized).strip("-")
    return f"{sanitized or 'image'}.{extension}"


def image_content_type(extension: str) -> str:
    return f"image/{'jpeg' if extension == 'jpg' else extension}"


@dataclass
class ImportService:
    """Loads external content into the catalog."""

    tag_repository: TagRepository
    recipe_repository: RecipeRepository
    image_storage: ImageStorage | None = None
    image_fetcher: ImageFetcher | None = None

    def import_tag_groups(self, records: Iterable[CsvRecord]) -> dict[str, UUID]:
        """Import `name,display_order` rows and return a name to id map."""
        group_map: dict[str, UUID] = {}
        for record in records:
            name = _field(record, "name")
            if not name:
                logger.warning("Skipping tag group with no name: %s", dict(record))
                continue
            display_order = _parse_order(_field(record, "display_order"), name)
            group_id = self._ensure_tag_group(name, display_order)
            if group_id is not None:
                group_map[name] = group_id
        return group_map

    def import_tags(
        self, records: Iterable[CsvRecord], group_map: Mapping[str, UUID]
    ) -> dict[str, UUID]:
        """Import `name,tag_group` rows and return a name to id map."""
        tag_map: dict[str, UUID] = {}
        for record in records:
            name = _field(record, "name")
            group_name = _field(record, "tag_group")
            if not name or not group_name:
                logger.warning(
                    "Skipping tag with missing name or tag_group: %s", dict(record)
                )
                continue
            group_id = group_map.get(group_name)
            if group_id is None:
                logger.warning(
                    'Tag group "%s" not found for tag "%s", skipping', group_name, name
                )
                continue
            tag_id = self._ensure_tag(group_id, name, group_name)
            if tag_id is not None:
                tag_map[name] = tag_id
        return tag_map

    def import_recipes(
        self, records: Iterable[CsvRecord], tag_map: Mapping[str, UUID]
    ) -> RecipeImportResult:
        """Import recipe rows, linking tags and ingredients through the tag map."""
        created = skipped = failed = 0
        for record in records:
            name = _field(record, "name")
            if not name:
                logger.warning("Skipping recipe with no name: %s", dict(record))
                failed += 1
                continue
            payload = {
                "slug": _field(record, "slug") or generate_slug(name),
                "name": name,
                "image_url": _field(record, "image_url") or None,
                "ingredients_text": ensure_document(record.get("ingredients_text")),
                "instructions": ensure_document(record.get("instructions")),
                "inspiration": ensure_document(record.get("inspiration")),
            }
            outcome = self._create_recipe(
                payload,
                _resolve(split_names(record.get("tags")), tag_map),
                _resolve(split_names(record.get("ingredients")), tag_map),
            )
            if outcome is True:
                created += 1
            elif outcome is False:
                skipped += 1
            else:
                failed += 1
        logger.info(
            "Import complete: %s created, %s skipped, %s errors",
            created,
            skipped,
            failed,
        )
        return RecipeImportResult(created=created, skipped=skipped, failed=failed)

    def import_all(
        self,
        group_records: Iterable[CsvRecord],
        tag_records: Iterable[CsvRecord],
        recipe_records: Iterable[CsvRecord],
    ) -> ImportSummary:
        """Import tag groups, tags and recipes in order."""
        logger.info("Importing tag groups")
        group_map = self.import_tag_groups(group_records)
        logger.info("Importing tags")
        tag_map = self.import_tags(tag_records, group_map)
        logger.info("Importing recipes")
        recipes = self.import_recipes(recipe_records, tag_map)
        return ImportSummary(
            tag_groups=len(group_map), tags=len(tag_map), recipes=recipes
        )

    async def import_cms_export(self, export: CmsExport) -> ImportSummary:
        """Import a CMS export, re-hosting remote recipe images."""
        group_map: dict[str, UUID] = {}
        for group in export.tag_groups:
            group_id = self._ensure_tag_group(group.name.strip(), group.display_order)
            if group_id is not None:
                group_map[group.key] = group_id
                group_map[group.name] = group_id

        tag_map: dict[str, UUID] = {}
        for tag in export.tags:
            group_id = group_map.get(tag.tag_group)
            if group_id is None:
                logger.warning(
                    "Tag group %s not found for tag %s", tag.tag_group, tag.name
                )
                continue
            tag_id = self._ensure_tag(group_id, tag.name.strip(), tag.tag_group)
            if tag_id is not None:
                tag_map[tag.key] = tag_id
                tag_map[tag.name] = tag_id

        created = skipped = failed = 0
        for recipe in export.recipes:
            slug = recipe.slug or generate_slug(recipe.name)
            try:
                existing = self.recipe_repository.get_by_slug(slug)
            except Exception:
                logger.exception('Error looking up recipe "%s"', recipe.name)
                failed += 1
                continue
            if existing:
                logger.info(
                    'Recipe "%s" already exists (slug: %s), skipping', recipe.name, slug
                )
                skipped += 1
                continue
            payload = {
                "slug": slug,
                "name": recipe.name,
                "image_url": await self._rehost_image(recipe, slug),
                "ingredients_text": ensure_document(recipe.ingredients_text),
                "instructions": ensure_document(recipe.instructions),
                "inspiration": ensure_document(recipe.inspiration),
            }
            if recipe.created_at:
                payload["created_at"] = recipe.created_at
            if recipe.updated_at:
                payload["updated_at"] = recipe.updated_at
            outcome = self._create_recipe(
                payload,
                _resolve(recipe.tags, tag_map),
                _resolve(recipe.ingredients, tag_map),
                check_existing=False,
            )
            if outcome is True:
                created += 1
            elif outcome is False:
                skipped += 1
            else:
                failed += 1

        return ImportSummary(
            tag_groups=len({*group_map.values()}),
            tags=len({*tag_map.values()}),
            recipes=RecipeImportResult(created=created, skipped=skipped, failed=failed),
        )

    def backfill_structured_ingredients(self) -> int:
        """Copy ingredient join rows into empty structured ingredient lists."""
        updated = 0
        for recipe in self.recipe_repository.list_recipes():
            if recipe.ingredients_structured or not recipe.ingredient_tags:
                continue
            rows = [IngredientRow(tag_id=tag.id) for tag in recipe.ingredient_tags]
            try:
                self.recipe_repository.update_recipe(
                    recipe.id,
                    {"ingredients_structured": serialize_ingredient_rows(rows)},
                )
            except Exception:
                logger.exception("Failed to backfill ingredients for %s", recipe.slug)
                continue
            logger.info(
                "Backfilled %s ingredient rows for %s", len(rows), recipe.slug
            )
            updated += 1
        return updated

    async def rehost_existing_images(self) -> ImageMigrationResult:
        """Move external recipe images into image storage.

        Recipes without an image are ignored. Images already served from the
        storage bucket, or that are not http URLs, are skipped.
        """
        if self.image_fetcher is None or self.image_storage is None:
            raise RuntimeError("Image fetcher and storage are required")
        migrated = skipped = failed = 0
        for recipe in self.recipe_repository.list_recipes():
            source = recipe.image_url
            if not source:
                continue
            if not source.startswith("http") or any(
                marker in source for marker in _HOSTED_IMAGE_MARKERS
            ):
                logger.info('Skipping "%s", image already hosted', recipe.name)
                skipped += 1
                continue
            try:
                content, _ = await self.image_fetcher.fetch(source)
                extension = image_extension(source)
                public_url = self.image_storage.upload(
                    image_file_name(recipe.slug, extension),
                    content,
                    image_content_type(extension),
                )
                self.recipe_repository.update_recipe(
                    recipe.id, {"image_url": public_url}
                )
            except Exception:
                logger.exception('Error migrating image for "%s"', recipe.name)
                failed += 1
                continue
            logger.info("Migrated image for %s: %s", recipe.slug, public_url)
            migrated += 1
        logger.info(
            "Image migration complete: %s migrated, %s skipped, %s errors",
            migrated,
            skipped,
            failed,
        )
        return ImageMigrationResult(migrated=migrated, skipped=skipped, failed=failed)

    def _ensure_tag_group(self, name: str, display_order: int) -> UUID | None:
        try:
            existing = self.tag_repository.find_tag_group(name)
            if existing:
                logger.info('Tag group "%s" already exists, skipping', name)
                return existing.id
            group = self.tag_repository.create_tag_group(name, display_order, None)
        except Exception:
            logger.exception('Error creating tag group "%s"', name)
            return None
        logger.info("Created tag group: %s", name)
        return group.id

    def _ensure_tag(self, group_id: UUID, name: str, group_name: str) -> UUID | None:
        try:
            existing = self.tag_repository.find_tag(group_id, name)
            if existing:
                logger.info(
                    'Tag "%s" already exists in "%s", skipping', name, group_name
                )
                return existing.id
            tag = self.tag_repository.create_tag(group_id, name)
        except Exception:
            logger.exception('Error creating tag "%s"', name)
            return None
        logger.info("Created tag: %s (%s)", name, group_name)
        return tag.id

    def _create_recipe(
        self,
        payload: dict[str, object],
        tag_ids: list[UUID],
        ingredient_tag_ids: list[UUID],
        check_existing: bool = True,
    ) -> bool | None:
        """Insert one recipe; True when created, False when skipped, None on error."""
        name = payload["name"]
        slug = str(payload["slug"])
        try:
            if check_existing and self.recipe_repository.get_by_slug(slug):
                logger.info(
                    'Recipe "%s" already exists (slug: %s), skipping', name, slug
                )
                return False
            payload["ingredients_structured"] = serialize_ingredient_rows(
                [IngredientRow(tag_id=tag_id) for tag_id in ingredient_tag_ids]
            )
            recipe_id = self.recipe_repository.create_recipe(payload)
            self.recipe_repository.link_tags(recipe_id, tag_ids)
            self.recipe_repository.link_ingredients(recipe_id, ingredient_tag_ids)
        except ConflictError:
            logger.info('Recipe "%s" already exists (slug: %s), skipping', name, slug)
            return False
        except Exception:
            logger.exception('Error creating recipe "%s"', name)
            return None
        logger.info("Created recipe: %s", name)
        return True

    async def _rehost_image(self, recipe: CmsRecipe, slug: str) -> str | None:
        source = recipe.image or recipe.image_url
        if not source:
            return None
        if not source.startswith("http"):
            return source
        if self.image_fetcher is None or self.image_storage is None:
            return source
        try:
            content, _ = await self.image_fetcher.fetch(source)
            extension = image_extension(source)
            return self.image_storage.upload(
                image_file_name(slug, extension),
                content,
                image_content_type(extension),
            )
        except Exception:
            logger.exception("Error processing image for %s", recipe.name)
            return None


def _field(record: CsvRecord, key: str) -> str:
    return (record.get(key) or "").strip()


def _parse_order(raw: str, name: str) -> int:
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning('Invalid display_order "%s" for tag group "%s"', raw, name)
        return 0


def _resolve(names: Iterable[str], mapping: Mapping[str, UUID]) -> list[UUID]:
    resolved: list[UUID] = []
    for name in names:
        tag_id = mapping.get(name.strip())
        if tag_id is not None and tag_id not in resolved:
            resolved.append(tag_id)
    return resolved
