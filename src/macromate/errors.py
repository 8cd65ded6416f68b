"""Application error taxonomy.

Every error a caller can recover from derives from `AppError`, which carries
the HTTP status the API layer renders it with.
"""

from uuid import UUID


class AppError(Exception):
    """Base class for recoverable application errors."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, object] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(AppError):
    """Invalid credentials, duplicate account or missing session."""

    status_code = 401


class DuplicateAccountError(AuthenticationError):
    """Sign-up attempted with a username that already exists."""

    status_code = 409


class ValidationError(AppError):
    """User input was rejected before any write."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field} if field else None)


class MealValidationError(ValidationError):
    """A meal failed validation, e.g. it has no food items."""


class InvalidNutrientsError(AppError):
    """A nutrient record had a missing, non-numeric or negative field."""

    status_code = 422


class MealNotFoundError(AppError):
    """The meal does not exist or belongs to another user."""

    status_code = 404

    def __init__(self, meal_id: UUID):
        super().__init__(
            "Meal not found or permission denied.", {"meal_id": str(meal_id)}
        )


class PersistenceError(AppError):
    """The document store rejected or failed an operation."""

    status_code = 503

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message, {"operation": operation} if operation else None)


class PhotoNotFoundError(AppError):
    """The storage object for a photo is already absent."""

    status_code = 404


class LookupFailedError(AppError):
    """The model returned no usable answer for a food lookup."""

    status_code = 502
