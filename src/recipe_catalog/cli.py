"""Command-line importers and maintenance tasks for the recipe catalog.

Usage:
    recipe-import csv <tag-groups.csv> <tags.csv> <recipes.csv>
    recipe-import csv --tag-groups groups.csv [--tags tags.csv [--recipes r.csv]]
    recipe-import cms <export.json>
    recipe-import backfill-ingredients
    recipe-import migrate-images
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import pydantic

from recipe_catalog.app_logging import configure_logging
from recipe_catalog.containers import AppContainer, build_container
from recipe_catalog.domain.cms import CmsExport
from recipe_catalog.domain.imports import ImportSummary
from recipe_catalog.services.importer import read_csv_records

logger = logging.getLogger(__name__)

ContainerFactory = Callable[[], AppContainer]


class UsageError(Exception):
    """Raised when command arguments are missing or point at missing files."""


async def cmd_csv(args: argparse.Namespace, container: AppContainer) -> None:
    groups_path, tags_path, recipes_path = _csv_paths(args)
    group_records = _read_records(groups_path)
    tag_records = _read_records(tags_path)
    recipe_records = _read_records(recipes_path)
    summary = container.import_service.import_all(
        group_records, tag_records, recipe_records
    )
    _print_summary(summary)


async def cmd_cms(args: argparse.Namespace, container: AppContainer) -> None:
    path = _existing(args.file)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        export = CmsExport.model_validate(payload)
    except (json.JSONDecodeError, pydantic.ValidationError) as exc:
        raise UsageError(f"Invalid CMS export {path}: {exc}") from exc
    summary = await container.import_service.import_cms_export(export)
    _print_summary(summary)


async def cmd_backfill(args: argparse.Namespace, container: AppContainer) -> None:
    updated = container.import_service.backfill_structured_ingredients()
    print(f"Backfilled structured ingredients for {updated} recipe(s)")


async def cmd_migrate_images(
    args: argparse.Namespace, container: AppContainer
) -> None:
    result = await container.import_service.rehost_existing_images()
    print(
        f"Migrated {result.migrated} image(s): "
        f"{result.skipped} skipped, {result.failed} failed"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-import", description="Bulk import tools for the recipe catalog"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log at DEBUG level"
    )
    sub = parser.add_subparsers(dest="cmd")

    s = sub.add_parser("csv", help="import tag groups, tags and recipes from CSV")
    s.add_argument("files", nargs="*", help="tag-groups.csv tags.csv recipes.csv")
    s.add_argument("--tag-groups", help="tag groups CSV (name,display_order)")
    s.add_argument("--tags", help="tags CSV (name,tag_group); needs --tag-groups")
    s.add_argument("--recipes", help="recipes CSV; needs --tags and --tag-groups")
    s.set_defaults(func=cmd_csv)

    s = sub.add_parser("cms", help="import a CMS JSON export")
    s.add_argument("file", help="export with recipes, tags and tagGroups arrays")
    s.set_defaults(func=cmd_cms)

    s = sub.add_parser(
        "backfill-ingredients",
        help="write structured ingredients from ingredient join rows",
    )
    s.set_defaults(func=cmd_backfill)

    s = sub.add_parser(
        "migrate-images", help="re-host external recipe images in image storage"
    )
    s.set_defaults(func=cmd_migrate_images)
    return parser


def main(
    argv: Sequence[str] | None = None,
    container_factory: ContainerFactory = build_container,
) -> int:
    """Run the importer CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    if args.func is cmd_csv:
        try:
            _csv_paths(args)
        except UsageError as exc:
            print(exc, file=sys.stderr)
            return 1
    container = container_factory()
    try:
        asyncio.run(_run(args, container))
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Import failed")
        return 1
    return 0


async def _run(args: argparse.Namespace, container: AppContainer) -> None:
    try:
        await args.func(args, container)
    finally:
        await container.close_resources()


def _csv_paths(
    args: argparse.Namespace,
) -> tuple[Path | None, Path | None, Path | None]:
    if args.files:
        if len(args.files) != 3:  # noqa: PLR2004
            raise UsageError(
                "Pass three files: <tag-groups.csv> <tags.csv> <recipes.csv>"
            )
        groups, tags, recipes = args.files
    else:
        groups, tags, recipes = args.tag_groups, args.tags, args.recipes
    if not groups:
        raise UsageError("Missing tag groups CSV")
    if recipes and not tags:
        raise UsageError("--recipes needs --tags and --tag-groups")
    return (
        _existing(groups),
        _existing(tags) if tags else None,
        _existing(recipes) if recipes else None,
    )


def _existing(raw: str) -> Path:
    path = Path(raw)
    if not path.is_file():
        raise UsageError(f"File not found: {path}")
    return path


def _read_records(path: Path | None) -> list[dict[str, str]]:
    if path is None:
        return []
    return read_csv_records(path.read_text(encoding="utf-8"))


def _print_summary(summary: ImportSummary) -> None:
    print(summary.message)
    print(f"  tag groups: {summary.tag_groups}")
    print(f"  tags: {summary.tags}")
    print(
        f"  recipes: {summary.recipes.created} created, "
        f"{summary.recipes.skipped} skipped, {summary.recipes.failed} failed"
    )


if __name__ == "__main__":
    sys.exit(main())
