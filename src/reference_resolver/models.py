"""Data models for reference resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from src.knowledge_tree.indexer import TreeIndex
from src.knowledge_tree.models import ExternalInformation
from src.models.page_record import SpaceRef


class ReferenceState(Enum):
    """Progress of a referenced document through the placeholder worklist."""

    PENDING = "pending"
    STUBBED = "stubbed"
    RESOLVED = "resolved"


@dataclass
class PageReference:
    """A link from migrated markup to a document published as its own page.

    Attributes:
        node_id: Id of the referenced export node
        title: Page title the link points at
        state: Worklist state
        page_id: Target page id once stubbed
    """

    node_id: str
    title: str
    state: ReferenceState = ReferenceState.PENDING
    page_id: Optional[str] = None


@dataclass
class ResolutionContext:
    """Read-only inputs shared by every rewrite of one migration request.

    Attributes:
        index: Id index of the export tree
        space: Target space of the migration
        shared_space: Space key or id of the shared paragraph hub
        image_space: Space key or id of the image hub
        root_id: Id of the node being migrated; links to it are not stubbed
        placeholder_text: Literal marker of stub pages
        info_lookup: External id -> tooltip information
        ignored_image_ids: Image ids never hoisted to the hub
    """

    index: TreeIndex
    space: SpaceRef
    shared_space: str
    image_space: str
    root_id: Optional[str] = None
    placeholder_text: str = "to be migrated"
    info_lookup: Dict[str, ExternalInformation] = field(default_factory=dict)
    ignored_image_ids: FrozenSet[str] = frozenset()
