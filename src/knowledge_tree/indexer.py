"""Id lookup over an export tree.

The tree is kept as an owned structure; the index is a flat list of nodes in
pre-order plus a map from node id to position in that list. Cross-document
references are resolved through the index, never through back-pointers.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .errors import DuplicateNodeIdError
from .models import DocumentNode

logger = logging.getLogger(__name__)


class DuplicatePolicy(Enum):
    """What to do when two nodes share an id."""

    LAST_WINS = "last_wins"
    STRICT = "strict"


@dataclass
class TreeIndex:
    """Read-only id lookup built by :func:`build_index`.

    Attributes:
        nodes: Every node of the tree in depth-first pre-order
        positions: Node id to position in ``nodes``
    """

    nodes: List[DocumentNode] = field(default_factory=list)
    positions: Dict[str, int] = field(default_factory=dict)

    def get(self, node_id: Optional[str]) -> Optional[DocumentNode]:
        if not node_id:
            return None
        position = self.positions.get(node_id)
        return self.nodes[position] if position is not None else None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.positions

    def __len__(self) -> int:
        return len(self.positions)

    def ids(self) -> Iterator[str]:
        return iter(self.positions)

    def find_by_title(self, title: str) -> Optional[DocumentNode]:
        """First node, in traversal order, whose title is ``title``."""
        for node in self.nodes:
            if node.title == title:
                return node
        return None

    def lookup(self, key: str) -> Optional[DocumentNode]:
        """Find a node by id first, then by title."""
        return self.get(key) or self.find_by_title(key)


def build_index(
    root: DocumentNode,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> TreeIndex:
    """Index every node of the tree by id, visiting each node exactly once.

    Traversal is an iterative depth-first pre-order walk, so the depth of the
    export does not matter. Nodes without an id are visited but not indexed.

    Args:
        root: Root of the export tree
        duplicate_policy: LAST_WINS keeps the later node (in traversal order)
            and logs a warning; STRICT raises on the first repeat

    Returns:
        TreeIndex over the tree

    Raises:
        DuplicateNodeIdError: On a repeated id under the STRICT policy
    """
    index = TreeIndex()
    stack = [root]
    while stack:
        node = stack.pop()
        index.nodes.append(node)
        if node.id:
            previous = index.get(node.id)
            if previous is not None:
                if duplicate_policy is DuplicatePolicy.STRICT:
                    raise DuplicateNodeIdError(node.id, previous.title, node.title)
                logger.warning(
                    f"Duplicate node id '{node.id}': "
                    f"'{node.title}' replaces '{previous.title}'"
                )
            index.positions[node.id] = len(index.nodes) - 1
        stack.extend(reversed(node.children))

    logger.debug(f"Indexed {len(index)} node ids over {len(index.nodes)} nodes")
    return index
