"""Translation of PostgREST errors into application errors."""

from supabase import PostgrestAPIError

from recipe_catalog.errors import ConflictError, StorageError

UNIQUE_VIOLATION = "23505"


def translate_api_error(exc: PostgrestAPIError, conflict_message: str) -> Exception:
    """Map a unique violation to ConflictError and anything else to StorageError."""
    if exc.code == UNIQUE_VIOLATION:
        return ConflictError(conflict_message)
    return StorageError(exc.message or "Database request failed")
