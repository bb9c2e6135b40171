"""Custom exception types for domain and API layers."""


class AppError(Exception):
    """Base app exception."""


class ValidationError(AppError):
    """Validation failure for user input."""


class NotFoundError(AppError):
    """Referenced record does not exist."""


class PersistenceError(AppError):
    """Underlying storage failure."""
