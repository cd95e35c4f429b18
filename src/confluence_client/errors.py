"""Typed exception hierarchy for migration and Confluence-related errors.

This module defines the custom exceptions shared by every stage of the
migration pipeline. All exceptions inherit from MigrationError so the request
boundary can catch them in one place, and carry descriptive messages with the
context needed for debugging (status codes, raw bodies, identities tried).
"""

from dataclasses import dataclass
from typing import List, Optional


class MigrationError(Exception):
    """Base exception for all knosys-migrate errors.

    Use this to catch any application-level error from the migration tool.
    """
    pass


class ValidationError(MigrationError):
    """Raised when a migration request is missing required input.

    Covers a missing JSON payload, a missing space identifier and a missing
    hub space for shared content.
    """

    def __init__(self, message: str):
        super().__init__(message)


class TransformError(MigrationError):
    """Raised when markup cannot be parsed or serialized."""

    def __init__(self, message: str):
        super().__init__(message)


class ConfluenceError(MigrationError):
    """Base exception for all Confluence-related errors."""
    pass


@dataclass
class AuthAttempt:
    """One request attempt under a single identity.

    Attributes:
        identity: Name of the identity used ("app" or "user")
        status: HTTP status code returned
        body: Raw response body
    """

    identity: str
    status: int
    body: str


class InvalidCredentialsError(ConfluenceError):
    """Raised when API credentials are invalid or authentication fails."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"API key is invalid (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class NotFoundError(ConfluenceError):
    """Raised when a lookup by id or key returns no result."""
    pass


class PageNotFoundError(NotFoundError):
    """Raised when a requested page does not exist."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class SpaceNotFoundError(NotFoundError):
    """Raised when a space key or id cannot be resolved."""

    def __init__(self, space: str):
        super().__init__(f"Space {space} not found")
        self.space = space


class APIUnreachableError(ConfluenceError):
    """Raised when the Confluence API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class ExternalServiceError(ConfluenceError):
    """Raised for any non-success response from the page store."""

    def __init__(self, operation: str, status: int, body: str):
        super().__init__(f"{operation} failed: {status} {body}")
        self.operation = operation
        self.status = status
        self.body = body


class VersionConflictError(ExternalServiceError):
    """Raised when the page store rejects a version-stamped update."""

    def __init__(self, page_id: str, version: int, body: str = ""):
        super().__init__(
            f"update_page({page_id})", 409,
            body or f"version {version} is stale",
        )
        self.page_id = page_id
        self.version = version


class APIAccessError(ConfluenceError):
    """Raised when API access fails under every identity or after retries.

    When the authorization fallback was used, ``attempts`` holds every
    identity's status and body; the message surfaces the primary failure.
    """

    def __init__(
        self,
        message: str = "Confluence API failure (after 3 retries)",
        attempts: Optional[List[AuthAttempt]] = None,
    ):
        super().__init__(message)
        self.attempts = list(attempts or [])

    @property
    def status(self) -> Optional[int]:
        """Status returned to the primary identity, if any."""
        return self.attempts[0].status if self.attempts else None

    @property
    def body(self) -> Optional[str]:
        """Body returned to the primary identity, if any."""
        return self.attempts[0].body if self.attempts else None
