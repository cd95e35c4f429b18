"""Knowledge-base export trees: data model, id index and content extraction."""

from .models import DocumentNode, ExternalInformation, Field, ItemType
from .indexer import DuplicatePolicy, TreeIndex, build_index
from .extractor import ContentExtractor
from .errors import KnowledgeTreeError, DuplicateNodeIdError

__all__ = [
    'DocumentNode',
    'ExternalInformation',
    'Field',
    'ItemType',
    'DuplicatePolicy',
    'TreeIndex',
    'build_index',
    'ContentExtractor',
    'KnowledgeTreeError',
    'DuplicateNodeIdError',
]
