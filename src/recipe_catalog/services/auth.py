"""User authentication and role checks."""

from dataclasses import dataclass
from typing import Protocol

from recipe_catalog.domain.users import DEFAULT_ROLE, ROLE_HIERARCHY, UserRecord
from recipe_catalog.errors import AuthenticationError, PermissionDeniedError


class UserDirectory(Protocol):
    """Interface for resolving access tokens to users."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning the access token, if it is valid."""


def has_role(user: UserRecord, required_role: str) -> bool:
    """Return true when the user's role is at least the required role."""
    current = ROLE_HIERARCHY.get(user.role or DEFAULT_ROLE, 0)
    return current >= ROLE_HIERARCHY[required_role]


def require_role(user: UserRecord, required_role: str) -> UserRecord:
    """Return the user, or raise when their role is too low."""
    if not has_role(user, required_role):
        raise PermissionDeniedError("Insufficient permissions")
    return user


@dataclass
class AuthService:
    """Application service for request authentication."""

    directory: UserDirectory

    def authenticate(self, access_token: str | None) -> UserRecord:
        """Return the signed-in user, or raise AuthenticationError."""
        if not access_token:
            raise AuthenticationError("Unauthorized")
        user = self.directory.get_user(access_token)
        if user is None:
            raise AuthenticationError("Unauthorized")
        return user
