"""Resolves access tokens through the Supabase auth API."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthApiError, Client

from recipe_catalog.domain.users import DEFAULT_ROLE, ROLE_HIERARCHY, UserRecord
from recipe_catalog.services.auth import UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class SupabaseUserDirectory(UserDirectory):
    """User directory backed by Supabase auth."""

    client: Client

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the token's user with the role from user metadata."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError:
            logger.warning("Rejected access token")
            return None
        if response is None or response.user is None:
            return None
        user = response.user
        role = (user.user_metadata or {}).get("role") or DEFAULT_ROLE
        if role not in ROLE_HIERARCHY:
            role = DEFAULT_ROLE
        return UserRecord(id=UUID(str(user.id)), email=user.email, role=role)
