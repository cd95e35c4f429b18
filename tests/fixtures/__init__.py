"""Test fixtures for migration tests.

This module provides sample knowledge-base export trees and the
builders used to assemble new ones inside tests.
"""

from .sample_trees import (
    FULL_TREE,
    OTHER_DOC,
    SIMPLE_TREE,
    THIRD_DOC,
    TOOLTIP_TREE,
    full_request,
    node,
    text_field,
)

__all__ = [
    "FULL_TREE",
    "OTHER_DOC",
    "SIMPLE_TREE",
    "THIRD_DOC",
    "TOOLTIP_TREE",
    "full_request",
    "node",
    "text_field",
]
