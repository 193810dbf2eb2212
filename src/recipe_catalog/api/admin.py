"""Admin endpoints for contributors: recipes, tags and bulk imports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

import pydantic
from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from recipe_catalog.api.dependencies import (
    parse_tag_ids,
    require_contributor,
    require_importer,
)
from recipe_catalog.api.models import (  # noqa: TC001
    RecipeBody,
    TagBody,
    TagGroupBody,
    TagRenameBody,
)
from recipe_catalog.domain.cms import CmsExport
from recipe_catalog.domain.imports import ImportSummary  # noqa: TC001
from recipe_catalog.domain.users import UserRecord  # noqa: TC001
from recipe_catalog.errors import RecipeCatalogError
from recipe_catalog.services.importer import read_csv_records

if TYPE_CHECKING:
    from recipe_catalog.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

MISSING_CSV_MESSAGE = (
    "Missing CSV files. Please upload tagGroups, tags, and recipes files."
)
MISSING_CMS_MESSAGE = "Missing required data: recipes, tags, tagGroups"


@router.get("/recipes", dependencies=[Depends(require_contributor)])
async def list_recipes(
    request: Request, tags: str | None = None, search: str | None = None
) -> dict[str, object]:
    """Return every recipe for the admin list, with filters."""
    container: AppContainer = request.app.state.container
    return {"recipes": container.recipe_service.browse(parse_tag_ids(tags), search)}


@router.get("/recipes/{recipe_id}", dependencies=[Depends(require_contributor)])
async def get_recipe(recipe_id: UUID, request: Request) -> dict[str, object]:
    """Return one recipe for editing."""
    container: AppContainer = request.app.state.container
    return {"recipe": container.recipe_service.get(recipe_id)}


@router.post("/recipes", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: RecipeBody,
    request: Request,
    user: UserRecord = Depends(require_contributor),
) -> dict[str, object]:
    """Create a recipe with its tag links."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.create(body.to_draft(), created_by=user.id)
    return {"recipe": recipe}


@router.put("/recipes/{recipe_id}", dependencies=[Depends(require_contributor)])
async def update_recipe(
    recipe_id: UUID, body: RecipeBody, request: Request
) -> dict[str, object]:
    """Update a recipe and replace its tag links."""
    container: AppContainer = request.app.state.container
    return {"recipe": container.recipe_service.update(recipe_id, body.to_draft())}


@router.delete("/recipes/{recipe_id}", dependencies=[Depends(require_contributor)])
async def delete_recipe(recipe_id: UUID, request: Request) -> dict[str, str]:
    """Delete a recipe."""
    container: AppContainer = request.app.state.container
    container.recipe_service.delete(recipe_id)
    return {"status": "ok"}


@router.post("/images", dependencies=[Depends(require_contributor)])
async def upload_image(
    request: Request, file: UploadFile = File(...)
) -> dict[str, str]:
    """Upload a recipe image and return its public URL."""
    container: AppContainer = request.app.state.container
    content = await file.read()
    url = container.recipe_service.upload_image(
        file.filename or "image", content, file.content_type
    )
    return {"url": url}


@router.post(
    "/tag-groups",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_contributor)],
)
async def create_tag_group(body: TagGroupBody, request: Request) -> dict[str, object]:
    """Create a tag group."""
    container: AppContainer = request.app.state.container
    group = container.tag_service.create_tag_group(
        body.name, body.display_order, body.kind
    )
    return {"tagGroup": group}


@router.put("/tag-groups/{group_id}", dependencies=[Depends(require_contributor)])
async def update_tag_group(
    group_id: UUID, body: TagGroupBody, request: Request
) -> dict[str, object]:
    """Update a tag group's name, order and kind."""
    container: AppContainer = request.app.state.container
    group = container.tag_service.update_tag_group(
        group_id, body.name, body.display_order, body.kind
    )
    return {"tagGroup": group}


@router.delete("/tag-groups/{group_id}", dependencies=[Depends(require_contributor)])
async def delete_tag_group(group_id: UUID, request: Request) -> dict[str, str]:
    """Delete a tag group."""
    container: AppContainer = request.app.state.container
    container.tag_service.delete_tag_group(group_id)
    return {"status": "ok"}


@router.post(
    "/tags",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_contributor)],
)
async def create_tag(body: TagBody, request: Request) -> dict[str, object]:
    """Create a tag inside a group."""
    container: AppContainer = request.app.state.container
    return {"tag": container.tag_service.create_tag(body.tag_group_id, body.name)}


@router.put("/tags/{tag_id}", dependencies=[Depends(require_contributor)])
async def rename_tag(
    tag_id: UUID, body: TagRenameBody, request: Request
) -> dict[str, object]:
    """Rename a tag."""
    container: AppContainer = request.app.state.container
    return {"tag": container.tag_service.rename_tag(tag_id, body.name)}


@router.delete("/tags/{tag_id}", dependencies=[Depends(require_contributor)])
async def delete_tag(tag_id: UUID, request: Request) -> dict[str, str]:
    """Delete a tag."""
    container: AppContainer = request.app.state.container
    container.tag_service.delete_tag(tag_id)
    return {"status": "ok"}


@router.post("/import-csv", dependencies=[Depends(require_importer)])
async def import_csv(
    request: Request,
    tag_groups: UploadFile | None = File(default=None, alias="tagGroups"),
    tags: UploadFile | None = File(default=None),
    recipes: UploadFile | None = File(default=None),
) -> JSONResponse:
    """Import tag groups, tags and recipes from three CSV uploads."""
    container: AppContainer = request.app.state.container
    if tag_groups is None or tags is None or recipes is None:
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_CSV_MESSAGE)
    try:
        group_records = read_csv_records(await _read_text(tag_groups))
        tag_records = read_csv_records(await _read_text(tags))
        recipe_records = read_csv_records(await _read_text(recipes))
    except UnicodeDecodeError:
        return _error_response(
            status.HTTP_400_BAD_REQUEST, "CSV files must be UTF-8 encoded"
        )
    try:
        summary = container.import_service.import_all(
            group_records, tag_records, recipe_records
        )
    except Exception as exc:
        logger.exception("CSV import failed")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, _failure_message(exc)
        )
    return JSONResponse(_summary_payload(summary))


@router.post("/migrate", dependencies=[Depends(require_importer)])
async def migrate(request: Request) -> JSONResponse:
    """Import a CMS export of recipes, tags and tag groups."""
    container: AppContainer = request.app.state.container
    try:
        body = await request.json()
    except ValueError:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")
    if not isinstance(body, dict) or any(
        body.get(key) is None for key in ("recipes", "tags", "tagGroups")
    ):
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_CMS_MESSAGE)
    try:
        export = CmsExport.model_validate(body)
    except pydantic.ValidationError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    try:
        summary = await container.import_service.import_cms_export(export)
    except Exception as exc:
        logger.exception("CMS migration failed")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, _failure_message(exc)
        )
    return JSONResponse(_summary_payload(summary))


@router.post("/structured-ingredients", dependencies=[Depends(require_importer)])
async def backfill_structured_ingredients(request: Request) -> dict[str, object]:
    """Fill empty structured ingredient lists from ingredient join rows."""
    container: AppContainer = request.app.state.container
    updated = container.import_service.backfill_structured_ingredients()
    return {"success": True, "updated": updated}


async def _read_text(upload: UploadFile) -> str:
    return (await upload.read()).decode("utf-8")


def _summary_payload(summary: ImportSummary) -> dict[str, object]:
    return {
        "success": True,
        "message": summary.message,
        "tagGroups": summary.tag_groups,
        "tags": summary.tags,
        "recipes": summary.recipes.created,
        "skipped": summary.recipes.skipped,
        "failed": summary.recipes.failed,
    }


def _failure_message(exc: Exception) -> str:
    if isinstance(exc, RecipeCatalogError):
        return str(exc)
    return "Import failed"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)
