"""Unit tests for knowledge_tree.indexer module."""

import logging

import pytest

from src.knowledge_tree.errors import DuplicateNodeIdError
from src.knowledge_tree.indexer import DuplicatePolicy, build_index
from src.knowledge_tree.models import DocumentNode
from tests.fixtures.sample_trees import FULL_TREE, node


def tree(*children):
    return DocumentNode.from_dict(node("root", "Root", children=list(children)))


class TestBuildIndex:
    """Test cases for build_index."""

    def test_every_id_is_indexed(self):
        """All ids of the tree are present."""
        index = build_index(DocumentNode.from_dict(FULL_TREE))
        for node_id in ("root-1", "s1", "sp1", "img-1", "d2", "c2", "d3", "l1"):
            assert node_id in index

    def test_pre_order(self):
        """Nodes are listed parent first, children left to right."""
        index = build_index(tree(node("a", children=[node("a1")]), node("b")))
        assert [n.id for n in index.nodes] == ["root", "a", "a1", "b"]

    def test_nodes_without_id_are_visited_not_indexed(self):
        index = build_index(tree(node(None, children=[node("deep")])))
        assert len(index.nodes) == 3
        assert "deep" in index
        assert len(index) == 2

    def test_deep_tree_does_not_recurse(self):
        """Depth beyond the recursion limit is fine."""
        current = DocumentNode(id="leaf")
        for depth in range(5000):
            current = DocumentNode(id=f"n{depth}", children=[current])
        index = build_index(current)

        assert "leaf" in index
        assert len(index) == 5001

    def test_duplicate_last_wins(self, caplog):
        """The later node replaces the earlier one and a warning is logged."""
        root = tree(node("dup", "First"), node("dup", "Second"))
        with caplog.at_level(logging.WARNING):
            index = build_index(root)

        assert index.get("dup").title == "Second"
        assert "Duplicate node id 'dup'" in caplog.text

    def test_duplicate_strict(self):
        """The strict policy refuses repeated ids."""
        root = tree(node("dup", "First"), node("dup", "Second"))
        with pytest.raises(DuplicateNodeIdError) as exc_info:
            build_index(root, DuplicatePolicy.STRICT)

        assert exc_info.value.first_title == "First"
        assert exc_info.value.second_title == "Second"


class TestTreeIndex:
    """Test cases for TreeIndex lookups."""

    def test_get_unknown_and_empty(self):
        index = build_index(tree())
        assert index.get("missing") is None
        assert index.get(None) is None

    def test_find_by_title_returns_first_in_traversal_order(self):
        index = build_index(tree(node("a", "Same"), node("b", "Same")))
        assert index.find_by_title("Same").id == "a"

    def test_lookup_tries_id_then_title(self):
        index = build_index(tree(node("a", "Alpha")))
        assert index.lookup("a").title == "Alpha"
        assert index.lookup("Alpha").id == "a"
        assert index.lookup("nothing") is None
