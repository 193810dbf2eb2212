"""Application error types."""


class RecipeCatalogError(Exception):
    """Base class for expected application errors."""


class ValidationError(RecipeCatalogError):
    """Raised when required input is missing or malformed."""


class NotFoundError(RecipeCatalogError):
    """Raised when a requested record does not exist."""


class AuthenticationError(RecipeCatalogError):
    """Raised when a request carries no valid user session."""


class PermissionDeniedError(RecipeCatalogError):
    """Raised when the user's role is below the required role."""


class ConflictError(RecipeCatalogError):
    """Raised when a unique natural key is already taken."""


class StorageError(RecipeCatalogError):
    """Raised when the hosted store fails to return a written row."""
