"""YAML configuration loading and validation.

Credentials never live here; they come from the environment (see
``src.confluence_client.auth``). The file only tunes how exports are
transformed and published.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from src.knowledge_tree.indexer import DuplicatePolicy
from src.page_operations.page_operations import DEFAULT_VERSION_MESSAGE

from .errors import ConfigError, FilesystemError

SPACER_IMAGE_ID = '2e6d82ef-524c-ea11-a960-000d3ad095fb.png'


@dataclass
class MigrationConfig:
    """Options for migration requests.

    Attributes:
        placeholder_text: Literal marker written to forward-reference stub pages
        duplicate_ids: Policy for node ids that occur more than once
        max_workers: Bounded fan-out when resolving referenced documents
        mapping_file: Path of the persisted node id -> page id mapping
        version_message: Message stored with every page update
        ignored_image_ids: Image node ids that are never hoisted to the hub
        class_colors: Legacy CSS class -> text color
        default_title: Root page title when nothing else provides one
    """
    placeholder_text: str = 'to be migrated'
    duplicate_ids: DuplicatePolicy = DuplicatePolicy.LAST_WINS
    max_workers: int = 4
    mapping_file: str = '.knosys-migrate/mappings.yaml'
    version_message: str = DEFAULT_VERSION_MESSAGE
    ignored_image_ids: List[str] = field(default_factory=lambda: [SPACER_IMAGE_ID])
    class_colors: Dict[str, str] = field(
        default_factory=lambda: {'alt3': 'red', 'alt2': 'green'}
    )
    default_title: str = 'Migrated page from Knosys'


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure (every key optional):
        placeholder_text: "to be migrated"
        duplicate_ids: last_wins        # or strict
        max_workers: 4
        mapping_file: ".knosys-migrate/mappings.yaml"
        version_message: "Updated via Knosys → Confluence migration"
        ignored_image_ids: ["2e6d82ef-524c-ea11-a960-000d3ad095fb.png"]
        class_colors: {alt3: red, alt2: green}
        default_title: "Migrated page from Knosys"

    Unknown keys are ignored.
    """

    DEFAULT_CONFIG_FILE = '.knosys-migrate/config.yaml'

    STRING_FIELDS = ('placeholder_text', 'mapping_file', 'version_message', 'default_title')

    @classmethod
    def load(cls, config_path: str = DEFAULT_CONFIG_FILE) -> MigrationConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            MigrationConfig; defaults when the file does not exist

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return MigrationConfig()
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return MigrationConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> MigrationConfig:
        """Validate a configuration dictionary field by field.

        Raises:
            ConfigError: Naming the first invalid field
        """
        config = MigrationConfig()

        for name in cls.STRING_FIELDS:
            if name in config_dict:
                value = config_dict[name]
                if not isinstance(value, str) or not value.strip():
                    raise ConfigError(
                        f"Field '{name}' must be a non-empty string", name
                    )
                setattr(config, name, value)

        if 'duplicate_ids' in config_dict:
            value = config_dict['duplicate_ids']
            try:
                config.duplicate_ids = DuplicatePolicy(value)
            except ValueError:
                allowed = ', '.join(p.value for p in DuplicatePolicy)
                raise ConfigError(
                    f"Field 'duplicate_ids' must be one of: {allowed}, got {value!r}",
                    'duplicate_ids'
                )

        if 'max_workers' in config_dict:
            value = config_dict['max_workers']
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(
                    "Field 'max_workers' must be a positive integer", 'max_workers'
                )
            config.max_workers = value

        if 'ignored_image_ids' in config_dict:
            value = config_dict['ignored_image_ids']
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(
                    "Field 'ignored_image_ids' must be a list of strings",
                    'ignored_image_ids'
                )
            config.ignored_image_ids = list(value)

        if 'class_colors' in config_dict:
            value = config_dict['class_colors']
            if not isinstance(value, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in value.items()
            ):
                raise ConfigError(
                    "Field 'class_colors' must map class names to colors",
                    'class_colors'
                )
            config.class_colors = dict(value)

        return config
