"""Request dependencies for authentication and role checks."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, Request

from recipe_catalog.domain.users import UserRecord
from recipe_catalog.errors import AuthenticationError
from recipe_catalog.services.auth import require_role

if TYPE_CHECKING:
    from recipe_catalog.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an `Authorization: Bearer` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UserRecord:
    """Resolve the signed-in user or raise AuthenticationError."""
    container = get_container(request)
    return container.auth_service.authenticate(bearer_token(authorization))


async def require_contributor(
    user: UserRecord = Depends(current_user),
) -> UserRecord:
    """Ensure the signed-in user is a contributor or admin."""
    return require_role(user, "contributor")


async def require_importer(
    request: Request,
    x_admin_token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
) -> UserRecord | None:
    """Accept the service admin token, else require a contributor session."""
    container = get_container(request)
    if x_admin_token is not None:
        if x_admin_token != container.settings.admin_token:
            raise AuthenticationError("Unauthorized")
        return None
    user = container.auth_service.authenticate(bearer_token(authorization))
    return require_role(user, "contributor")


def parse_tag_ids(raw: str | None) -> list[UUID]:
    """Parse a comma-separated tag id list, ignoring malformed ids."""
    tag_ids: list[UUID] = []
    for chunk in (raw or "").split(","):
        value = chunk.strip()
        if not value:
            continue
        try:
            tag_id = UUID(value)
        except ValueError:
            continue
        if tag_id not in tag_ids:
            tag_ids.append(tag_id)
    return tag_ids
