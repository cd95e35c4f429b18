"""Integration tests for the Knosys to Confluence migration.

These tests run whole migration requests through the pipeline, the
reference resolver, page operations and the YAML mapping store. Confluence
is replaced by the in-memory page store from tests.helpers, and mapping
files live in pytest temp directories.

Test Coverage:
- First migration: pages per space, storage constructs, stub backfill
- Shared content: hub page deduplication and reuse
- Repeated migration: idempotent re-runs and version-stamped updates
- Failures: error responses listing committed pages
"""
