"""Linearize an export node into storage-format markup."""

import logging
from typing import List

from src.storage_format.constructs import expand_markup, item_reference_markup

from .models import DocumentNode, ItemType

logger = logging.getLogger(__name__)

HUB_ITEM_TYPES = (ItemType.SHARED_PARAGRAPH, ItemType.IMAGE)


class ContentExtractor:
    """Produces the visible markup of a node from its fields.

    The node's own fields come first. Each child follows in order: a child
    that has children of its own contributes the fields of those children
    only (one level, never deeper); a leaf child contributes its own fields.

    Shared paragraphs and images are not inlined. They are emitted as empty
    ``data-itemid`` reference sites that the reference resolver later turns
    into include macros.
    """

    def extract(self, node: DocumentNode) -> str:
        parts: List[str] = [self.render_fields(node)]
        for child in node.children:
            if child.children:
                parts.extend(self.render_node(grandchild) for grandchild in child.children)
            else:
                parts.append(self.render_node(child))
        return "".join(parts)

    def render_node(self, node: DocumentNode) -> str:
        if node.item_type in HUB_ITEM_TYPES and node.id:
            return item_reference_markup(node.id)
        return self.render_fields(node)

    def render_fields(self, node: DocumentNode) -> str:
        """Render a node's fields.

        A non-empty LinkText/HiddenText pair becomes one expand macro and
        nothing else is emitted. Otherwise every field value is emitted in
        order except HiddenText.
        """
        link_text = node.field_value("LinkText")
        hidden_text = node.field_value("HiddenText")
        if link_text and hidden_text:
            return expand_markup(link_text, hidden_text)
        return "".join(f.value for f in node.fields if f.name != "HiddenText")
