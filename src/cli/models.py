"""Data models for CLI operations."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, page store failures)
    - VALIDATION_ERROR (2): The migration request is incomplete or malformed
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
