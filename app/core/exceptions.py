"""
Error kinds shared by the DAO, service and controller layers.

Each kind carries the HTTP status the controller layer answers with, so the
final kind-to-status mapping lives in one place (the exception handlers
registered in ``app.main``).
"""
from typing import Optional, Dict, Any


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class InvalidInputError(AppError):
    """Raised when an input record fails structural validation."""

    status_code = 400

    def __init__(self, message: str = "invalid input", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class NotFoundError(AppError):
    """Raised when no row matches the requested id."""

    status_code = 404


class StorageError(AppError):
    """Raised when the database rejects or fails a statement."""

    status_code = 500
