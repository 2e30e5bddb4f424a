"""
Custom exception classes for the voice routing migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigurationError(MigrationError):
    """Raised when a required URL or token cannot be determined."""


class UserCancelledError(MigrationError):
    """Raised when the operator declines a confirmation prompt."""


class AdminApiError(MigrationError):
    """Raised when an administrative API rejects a request."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


class EntityNotFoundError(AdminApiError):
    """Raised when the requested entity does not exist."""


class DuplicateEntityError(AdminApiError):
    """Raised when an entity with the same identity already exists."""
