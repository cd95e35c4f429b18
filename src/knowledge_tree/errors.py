"""Exceptions raised while reading export trees."""

from src.confluence_client.errors import MigrationError


class KnowledgeTreeError(MigrationError):
    """Base exception for export tree errors."""
    pass


class DuplicateNodeIdError(KnowledgeTreeError):
    """Raised by the strict duplicate policy when a node id repeats."""

    def __init__(self, node_id: str, first_title: str, second_title: str):
        super().__init__(
            f"Duplicate node id '{node_id}' "
            f"(first: '{first_title}', again: '{second_title}')"
        )
        self.node_id = node_id
        self.first_title = first_title
        self.second_title = second_title
