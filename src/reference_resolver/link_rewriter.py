"""Rewrite anchors of migrated markup into Confluence link constructs.

Handles, in order:
1. anchors whose text is the placeholder marker get the target's title back
2. ``href="#"`` anchors whose text is a bare domain become external links
3. ``data-itemid`` anchors become page links (documents) or URL links (links)
4. ``href="#name"`` anchors become anchor links
Bookmark targets are inserted separately by :meth:`LinkRewriter.insert_anchor_macros`.

Anchors that cannot be resolved are left exactly as they are.
"""

import logging
import re
import threading
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from src.knowledge_tree.models import DocumentNode, ItemType
from src.storage_format.constructs import (
    anchor_link,
    anchor_macro,
    page_link,
    url_link,
)

from .models import PageReference, ResolutionContext

logger = logging.getLogger(__name__)

ITEM_ID_ATTRIBUTES = ("data-itemid", "dataitemid")

BARE_DOMAIN_PATTERN = re.compile(
    r'^(?:www\.)?[a-z0-9-]+(?:\.[a-z0-9-]+)*\.[a-z]{2,}(?:/\S*)?$',
    re.IGNORECASE
)

BOOKMARK_HREF_PATTERN = re.compile(r'^#([A-Za-z0-9_-]+)$')

# Item types linked as pages; exports often omit itemType on documents
PAGE_ITEM_TYPES = (ItemType.DOCUMENT, ItemType.UNSPECIFIED)

BOOKMARK_TARGET_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p"]


def item_id_of(tag: Tag) -> Optional[str]:
    """Node id referenced by an element, if any."""
    for attribute in ITEM_ID_ATTRIBUTES:
        value = tag.get(attribute)
        if value:
            return str(value).strip()
    return None


def text_of(markup: str) -> str:
    """Plain text of a markup fragment."""
    return BeautifulSoup(markup, "html.parser").get_text().strip()


def page_title_for(node: DocumentNode, anchor_text: str = "") -> str:
    """Title a document node is published under.

    Precedence: DocumentTitle field, node title, anchor text, node id.
    """
    return (
        (node.document_title or "").strip()
        or node.title.strip()
        or anchor_text.strip()
        or (node.id or "")
    )


class LinkRewriter:
    """Typed tree edits turning export anchors into storage-format links.

    A document keeps the title chosen for its first link, so every later
    link to it, in this markup or in backfilled fragments, targets the same
    page.
    """

    def __init__(self, context: ResolutionContext):
        self.context = context
        self._titles: Dict[str, str] = {}
        self._titles_lock = threading.Lock()

    def title_for(self, node: DocumentNode, anchor_text: str = "") -> str:
        """Page title of ``node``, fixed by the first link to it."""
        with self._titles_lock:
            return self._titles.setdefault(node.id or "", page_title_for(node, anchor_text))

    def rewrite(self, soup: BeautifulSoup) -> List[PageReference]:
        """Apply every link rewrite to ``soup`` in place.

        Returns:
            One reference per distinct document that got a page link,
            excluding the document being migrated
        """
        self.repair_placeholder_text(soup)
        self.fix_bare_domains(soup)
        references = self.rewrite_item_links(soup)
        self.rewrite_bookmark_links(soup)
        return references

    def _item_anchors(self, soup: BeautifulSoup) -> List[Tag]:
        return [a for a in soup.find_all("a") if item_id_of(a)]

    def repair_placeholder_text(self, soup: BeautifulSoup) -> None:
        """Give placeholder-text anchors the title of the node they point at.

        The text becomes the target's DocumentTitle field, else its first
        field value. Unknown targets keep the placeholder text.
        """
        placeholder = self.context.placeholder_text
        for anchor in self._item_anchors(soup):
            if anchor.get_text().strip() != placeholder:
                continue
            target = self.context.index.get(item_id_of(anchor))
            if target is None or not target.fields:
                continue
            value = target.document_title
            if value is None:
                value = target.first_field_value()
            anchor.string = text_of(value)

    def fix_bare_domains(self, soup: BeautifulSoup) -> None:
        """Turn ``<a href="#">host.tld/path</a>`` into an external link."""
        for anchor in soup.find_all("a", href="#"):
            if item_id_of(anchor):
                continue
            text = anchor.get_text().strip()
            if not BARE_DOMAIN_PATTERN.match(text):
                continue
            anchor["href"] = f"https://{text}"
            anchor["target"] = "_blank"
            anchor["class"] = "externallink"
            logger.debug(f"Repaired bare domain link: {text}")

    def rewrite_item_links(self, soup: BeautifulSoup) -> List[PageReference]:
        """Rewrite ``data-itemid`` anchors that point at documents or links."""
        references: Dict[str, PageReference] = {}
        space_key = self.context.space.key

        for anchor in self._item_anchors(soup):
            node_id = item_id_of(anchor)
            node = self.context.index.get(node_id)
            if node is None:
                logger.debug(f"Leaving link to unknown node {node_id}")
                continue

            text = anchor.get_text().strip()
            if node.item_type in PAGE_ITEM_TYPES:
                title = self.title_for(node, text)
                anchor.replace_with(page_link(soup, title, space_key, text or title))
                if node.id != self.context.root_id and node.id not in references:
                    references[node.id] = PageReference(node_id=node.id, title=title)
            elif node.item_type is ItemType.LINK:
                url = (node.field_value("URL") or "").strip()
                if url:
                    anchor.replace_with(url_link(soup, url, text or node.title or url))
                else:
                    logger.debug(f"Link node {node_id} has no URL")

        return list(references.values())

    def rewrite_bookmark_links(self, soup: BeautifulSoup) -> None:
        """Rewrite ``href="#name"`` anchors to anchor links."""
        for anchor in soup.find_all("a", href=BOOKMARK_HREF_PATTERN):
            if item_id_of(anchor):
                continue
            name = BOOKMARK_HREF_PATTERN.match(anchor["href"]).group(1)
            anchor.replace_with(anchor_link(soup, name, anchor.get_text().strip()))

    def insert_anchor_macros(self, soup: BeautifulSoup) -> None:
        """Insert an anchor target for every Bookmark field of the tree.

        The marker goes right before the first heading or paragraph whose
        text contains the bookmark, or at the very start of the document.
        """
        for node in self.context.index.nodes:
            for f in node.fields:
                if f.name != "Bookmark" or not f.value:
                    continue
                bookmark = f.value.strip()
                marker = anchor_macro(soup, bookmark)
                target = next(
                    (
                        el for el in soup.find_all(BOOKMARK_TARGET_TAGS)
                        if bookmark in el.get_text()
                    ),
                    None,
                )
                if target is not None:
                    target.insert_before(marker)
                else:
                    soup.insert(0, marker)
