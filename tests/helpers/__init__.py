"""Test helper modules.

- fake_page_store: In-memory stand-in for the Confluence API wrapper
"""

from .fake_page_store import FakePageStore

__all__ = [
    'FakePageStore',
]
