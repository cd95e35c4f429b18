"""Command-line interface for the Knosys to Confluence migration.

This package provides the `knosys-migrate` CLI tool that runs migration
requests from export files and lists target spaces, with progress indication
and error handling.
"""

from .models import ExitCode
from .output import OutputHandler

__all__ = [
    'ExitCode',
    'OutputHandler',
]
