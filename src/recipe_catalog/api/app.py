"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from recipe_catalog.api.admin import router as admin_router
from recipe_catalog.api.calendar import router as calendar_router
from recipe_catalog.api.favorites import router as favorites_router
from recipe_catalog.api.recipes import router as recipes_router
from recipe_catalog.app_logging import configure_logging
from recipe_catalog.containers import AppContainer
from recipe_catalog.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RecipeCatalogError,
    StorageError,
    ValidationError,
)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RecipeCatalogError)
    async def handle_catalog_error(
        request: Request, exc: RecipeCatalogError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        message = str(exc) or "Request failed"
        if isinstance(exc, StorageError):
            logger.error("Storage failure on %s", request.url.path, exc_info=exc)
            message = _storage_message(request.app.state.container, exc)
        return JSONResponse({"error": message}, status_code=status_code)

    app.include_router(recipes_router)
    app.include_router(favorites_router)
    app.include_router(calendar_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: RecipeCatalogError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _storage_message(container: AppContainer, exc: StorageError) -> str:
    """Return a generic storage error, with detail only in local runs."""
    fallback = "Storage request failed"
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        return f"{fallback} (debug: {detail})"
    return fallback
