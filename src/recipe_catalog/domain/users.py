"""Domain models for authenticated users."""

from dataclasses import dataclass
from uuid import UUID

ROLE_HIERARCHY = {"viewer": 1, "contributor": 2, "admin": 3}
DEFAULT_ROLE = "viewer"


@dataclass(frozen=True)
class UserRecord:
    """Represents a signed-in user and their role."""

    id: UUID
    email: str | None
    role: str = DEFAULT_ROLE
