"""Data models for knowledge-base export trees.

An export is a recursive tree of nodes. Each node carries its identity and
type under ``detail``, an ordered list of named fields (values are usually
markup), its children, an opaque ``properties`` map, and optional external
information entries used for tooltips.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ItemType(Enum):
    """Node types that drive reference rewriting."""

    DOCUMENT = "Document"
    LINK = "Link"
    IMAGE = "Image"
    SHARED_PARAGRAPH = "SharedParagraph"
    UNSPECIFIED = ""
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ItemType":
        """Known types by name; no itemType at all is UNSPECIFIED."""
        if not value:
            return cls.UNSPECIFIED
        for item_type in cls:
            if item_type.value == value:
                return item_type
        return cls.OTHER


@dataclass
class Field:
    """A named field of a node."""

    name: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Field":
        value = data.get("value")
        return cls(
            name=str(data.get("name") or ""),
            value="" if value is None else str(value),
        )


@dataclass
class ExternalInformation:
    """External information entry attached to a node.

    Attributes:
        information_type: Entry kind, e.g. "Image / screenshot"
        content: Markup content of the entry (may be empty)
        fields: Named fields, used when ``content`` is empty
        key: External id the entry is looked up by
    """

    information_type: str
    content: str = ""
    fields: List[Field] = field(default_factory=list)
    key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExternalInformation":
        key = data.get("externalId") or data.get("id")
        return cls(
            information_type=str(data.get("informationType") or ""),
            content=str(data.get("content") or ""),
            fields=[Field.from_dict(f) for f in data.get("fields") or [] if f],
            key=str(key) if key else None,
        )

    def text(self) -> str:
        """Entry content, falling back to the value of its ``Text`` field."""
        if self.content:
            return self.content
        for f in self.fields:
            if f.name == "Text":
                return f.value
        return ""


@dataclass
class DocumentNode:
    """One node of an export tree.

    Attributes:
        id: Node id from ``detail.id`` (None when the export omits it)
        title: Node title from ``detail.title``
        item_type: Parsed ``detail.itemType``
        fields: Ordered named fields
        children: Ordered child nodes
        properties: Opaque auxiliary map
        external_information: Entries from ``external.information``
    """

    id: Optional[str]
    title: str = ""
    item_type: ItemType = ItemType.UNSPECIFIED
    fields: List[Field] = field(default_factory=list)
    children: List["DocumentNode"] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)
    external_information: List[ExternalInformation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentNode":
        """Build a node, and its whole subtree, from export JSON."""
        detail = data.get("detail") or {}
        node_id = detail.get("id")
        external = data.get("external") or {}
        return cls(
            id=str(node_id) if node_id else None,
            title=str(detail.get("title") or ""),
            item_type=ItemType.parse(detail.get("itemType")),
            fields=[Field.from_dict(f) for f in data.get("fields") or [] if f],
            children=[
                cls.from_dict(child) for child in data.get("children") or [] if child
            ],
            properties=dict(data.get("properties") or {}),
            external_information=[
                ExternalInformation.from_dict(entry)
                for entry in external.get("information") or []
                if entry
            ],
        )

    def field_value(self, name: str) -> Optional[str]:
        """Value of the first field called ``name``, or None."""
        for f in self.fields:
            if f.name == name:
                return f.value
        return None

    @property
    def document_title(self) -> Optional[str]:
        return self.field_value("DocumentTitle")

    def first_field_value(self) -> str:
        return self.fields[0].value if self.fields else ""

    def joined_field_values(self) -> str:
        """Non-empty field values joined with a single space."""
        return " ".join(f.value for f in self.fields if f.value)

    def deepest_descendant(self) -> "DocumentNode":
        """Follow children down to a leaf.

        At each level the first child with fields is taken, else the first
        child. Returns the node itself when it has no children.
        """
        target = self
        while target.children:
            target = next((c for c in target.children if c.fields), target.children[0])
        return target
