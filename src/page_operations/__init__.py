"""Publish engine for migrated Confluence pages.

Key classes:
    PageOperations: Space resolution, create, version-stamped update,
        get-or-create and publish
    PublishResult: Outcome of a publish call
    PublicationState: Unpublished -> PlaceholderCreated -> Populated
"""

from .models import PublicationState, PublishAction, PublishResult
from .page_operations import DEFAULT_VERSION_MESSAGE, PageOperations

__all__ = [
    "PageOperations",
    "DEFAULT_VERSION_MESSAGE",
    "PublicationState",
    "PublishAction",
    "PublishResult",
]
