"""
Back-office exception hierarchy.

Validation failures are raised before any gateway call. Gateway failures
travel inside ``GatewayResponse.error`` and are re-raised unchanged by the
domain services.
"""

from __future__ import annotations

from typing import Any, Optional


class BackofficeError(Exception):
    """Base exception for back-office failures."""


class EntityValidationError(BackofficeError):
    """Raised when a payload fails field-level validation."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ReferenceInUseError(EntityValidationError):
    """Raised when deleting a row that other rows still reference."""


class EntityNotFoundError(BackofficeError):
    """Raised when a record with the requested identity does not exist."""


class GatewayError(BackofficeError):
    """
    Failure reported by the query gateway (network, constraint, not found).

    ``code`` mirrors the backend's error code when one is available.
    """

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class StorageError(BackofficeError):
    """Raised when uploading or removing a stored asset fails."""
