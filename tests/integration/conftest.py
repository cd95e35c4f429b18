"""Pytest configuration and fixtures for integration tests.

Integration tests run whole migration requests through the real pipeline,
page operations and YAML mapping store against an in-memory page store.
"""

import pytest

from src.migration.config import MigrationConfig
from src.migration.mapping_store import YamlMappingStore
from src.migration.pipeline import MigrationPipeline
from tests.helpers.fake_page_store import FakePageStore


@pytest.fixture
def page_store() -> FakePageStore:
    """Page store with a target space and a hub space."""
    return FakePageStore(spaces=[
        {"id": "10", "key": "TEAM", "name": "Team"},
        {"id": "20", "key": "HUB", "name": "Hub"},
    ])


@pytest.fixture
def mapping_file(tmp_path) -> str:
    return str(tmp_path / ".knosys-migrate" / "mappings.yaml")


@pytest.fixture
def config(mapping_file) -> MigrationConfig:
    return MigrationConfig(mapping_file=mapping_file, max_workers=2)


@pytest.fixture
def make_pipeline(page_store, config):
    """Factory building a pipeline that reloads the mapping file, as a new process would."""
    def factory() -> MigrationPipeline:
        return MigrationPipeline(
            api=page_store,
            config=config,
            mapping_store=YamlMappingStore(config.mapping_file),
        )
    return factory

