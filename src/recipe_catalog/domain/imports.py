"""Domain models for bulk imports."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RecipeImportResult:
    """Counts from a recipe import pass."""

    created: int
    skipped: int
    failed: int


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of a full tag group, tag and recipe import."""

    tag_groups: int
    tags: int
    recipes: RecipeImportResult

    @property
    def message(self) -> str:
        """Human-readable summary line."""
        return f"Imported {self.recipes.created} recipes"


@dataclass(frozen=True)
class ImageMigrationResult:
    """Counts from re-hosting existing recipe images."""

    migrated: int
    skipped: int
    failed: int
