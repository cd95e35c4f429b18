"""Persisted association from export node ids to Confluence page ids.

The mapping makes re-runs idempotent: a node that already has a page is
updated or reused instead of created again. Stores must be safe to call from
the worker threads of the reference resolver.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import yaml

from .errors import ConfigError, FilesystemError

logger = logging.getLogger(__name__)


class MappingStore(ABC):
    """Key-value store of node id -> page id."""

    @abstractmethod
    def get(self, node_id: str) -> Optional[str]:
        """Page id recorded for ``node_id``, or None."""

    @abstractmethod
    def put(self, node_id: str, page_id: str) -> None:
        """Record (or replace) the page id for ``node_id``."""


class InMemoryMappingStore(MappingStore):
    """Mapping store that lives for the current process only."""

    def __init__(self, mappings: Optional[Dict[str, str]] = None):
        self._mappings: Dict[str, str] = dict(mappings or {})
        self._lock = threading.Lock()

    def get(self, node_id: str) -> Optional[str]:
        with self._lock:
            return self._mappings.get(node_id)

    def put(self, node_id: str, page_id: str) -> None:
        with self._lock:
            self._mappings[node_id] = str(page_id)

    def snapshot(self) -> Dict[str, str]:
        """Copy of every recorded mapping."""
        with self._lock:
            return dict(self._mappings)


class YamlMappingStore(InMemoryMappingStore):
    """Mapping store persisted to a YAML file after every change.

    File structure:
        mappings:
          "2e6d82ef-...": "123456"

    A missing or empty file is an empty mapping.
    """

    DEFAULT_MAPPING_FILE = '.knosys-migrate/mappings.yaml'

    def __init__(self, path: str = DEFAULT_MAPPING_FILE):
        self.path = path
        self._save_lock = threading.Lock()
        super().__init__(self._load(path))

    @classmethod
    def _load(cls, path: str) -> Dict[str, str]:
        """Read the mapping file.

        Raises:
            FilesystemError: If file cannot be read (except FileNotFoundError)
            ConfigError: If the file is malformed
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return {}
        except PermissionError:
            raise FilesystemError(path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(path, 'read', str(e))

        if not content.strip():
            return {}

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Mapping file must be a YAML dictionary, got {type(data).__name__}"
            )

        mappings = data.get('mappings') or {}
        if not isinstance(mappings, dict):
            raise ConfigError(
                f"Field 'mappings' must be a dictionary, got {type(mappings).__name__}",
                'mappings'
            )

        logger.debug(f"Loaded {len(mappings)} mappings from {path}")
        return {str(k): str(v) for k, v in mappings.items()}

    def _save(self) -> None:
        """Write every mapping back to the file.

        Raises:
            FilesystemError: If file cannot be written
        """
        yaml_str = yaml.safe_dump(
            {'mappings': self.snapshot()},
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=True
        )

        mapping_dir = os.path.dirname(self.path)
        if mapping_dir:
            try:
                os.makedirs(mapping_dir, exist_ok=True)
            except OSError as e:
                raise FilesystemError(mapping_dir, 'create_directory', str(e))

        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise FilesystemError(self.path, 'write', 'Permission denied')
        except OSError as e:
            raise FilesystemError(self.path, 'write', str(e))

    def put(self, node_id: str, page_id: str) -> None:
        with self._save_lock:
            super().put(node_id, page_id)
            self._save()
