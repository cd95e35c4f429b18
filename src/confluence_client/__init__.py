"""Confluence client library for the Knosys migration.

This package provides Python abstractions over the Confluence Cloud REST API v2,
including the two-identity authorization fallback used for every page read and
write, and the typed exception hierarchy shared by the whole pipeline.
"""

from .errors import (
    MigrationError,
    ValidationError,
    TransformError,
    ConfluenceError,
    AuthAttempt,
    InvalidCredentialsError,
    NotFoundError,
    PageNotFoundError,
    SpaceNotFoundError,
    APIUnreachableError,
    ExternalServiceError,
    VersionConflictError,
    APIAccessError,
)

__all__ = [
    "MigrationError",
    "ValidationError",
    "TransformError",
    "ConfluenceError",
    "AuthAttempt",
    "InvalidCredentialsError",
    "NotFoundError",
    "PageNotFoundError",
    "SpaceNotFoundError",
    "APIUnreachableError",
    "ExternalServiceError",
    "VersionConflictError",
    "APIAccessError",
]
