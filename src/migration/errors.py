"""Typed exception hierarchy for migration configuration and state files.

All exceptions inherit from MigrationSetupError, itself a MigrationError, so
the request boundary and the CLI can catch them together with API errors.
"""

from typing import Optional

from src.confluence_client.errors import MigrationError


class MigrationSetupError(MigrationError):
    """Base exception for configuration and local state errors."""
    pass


class FilesystemError(MigrationSetupError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(MigrationSetupError):
    """Raised when configuration or mapping file validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message
