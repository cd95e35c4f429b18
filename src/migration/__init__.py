"""Migration requests: configuration, id mapping store and request models.

The request pipeline lives in ``src.migration.pipeline``.
"""

from .errors import MigrationSetupError, FilesystemError, ConfigError
from .config import ConfigLoader, MigrationConfig
from .mapping_store import MappingStore, InMemoryMappingStore, YamlMappingStore
from .models import MigrationRequest, error_response

__all__ = [
    'MigrationSetupError',
    'FilesystemError',
    'ConfigError',
    'ConfigLoader',
    'MigrationConfig',
    'MappingStore',
    'InMemoryMappingStore',
    'YamlMappingStore',
    'MigrationRequest',
    'error_response',
]
