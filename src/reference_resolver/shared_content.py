"""Hoist shared paragraphs and images to hub pages.

A shared node is published once, as a page of its hub space titled after the
node, and every site that references it is replaced by an include macro.
Hub pages are found by title before being created and memoized per
``(hub space, title)`` for the whole request.
"""

import logging
import re
import threading
from typing import Dict, Optional, Tuple

from bs4 import BeautifulSoup

from src.confluence_client.errors import SpaceNotFoundError, ValidationError
from src.knowledge_tree.models import DocumentNode, ItemType
from src.models.page_record import PageRecord, SpaceRef
from src.page_operations.page_operations import PageOperations
from src.storage_format.constructs import image_markup, include_macro

from .link_rewriter import item_id_of
from .models import ResolutionContext

logger = logging.getLogger(__name__)

FILE_EXTENSION_PATTERN = re.compile(r'\.[A-Za-z0-9]{2,4}$')


def image_filename(image_id: str) -> str:
    """Attachment filename of an image node: ``<id>.png`` unless it has an extension."""
    if FILE_EXTENSION_PATTERN.search(image_id):
        return image_id
    return f"{image_id}.png"


class SharedContentHub:
    """Get-or-create hub pages and rewrite their reference sites."""

    def __init__(self, pages: PageOperations, context: ResolutionContext):
        self.pages = pages
        self.context = context
        self._memo: Dict[Tuple[str, str], PageRecord] = {}
        self._spaces: Dict[str, SpaceRef] = {}
        self._lock = threading.RLock()

    def rewrite(self, soup: BeautifulSoup) -> int:
        """Replace reference sites of shared nodes with include macros.

        Returns:
            Number of sites rewritten
        """
        rewritten = 0
        for site in [a for a in soup.find_all(True) if item_id_of(a)]:
            node = self.context.index.get(item_id_of(site))
            if node is None:
                continue
            hub = self.publish_node(node)
            if hub is None:
                continue
            space_key, title = hub
            site.replace_with(include_macro(soup, space_key, title))
            rewritten += 1
        return rewritten

    def publish_node(self, node: DocumentNode) -> Optional[Tuple[str, str]]:
        """Ensure the hub page of a shared node exists.

        Returns:
            ``(hub space key, page title)``, or None when the node is not
            hoisted (other types, ignored images, incomplete paragraphs)

        Raises:
            ValidationError: If the hub space cannot be resolved
        """
        if node.item_type is ItemType.SHARED_PARAGRAPH:
            title = (node.field_value("ParagraphTitle") or "").strip()
            body = node.field_value("Text") or ""
            if not title or not body:
                logger.debug(f"Shared paragraph {node.id} lacks a title or text")
                return None
            space = self._hub_space(self.context.shared_space, "sharedParagraphSpaceKey")
        elif node.item_type is ItemType.IMAGE:
            if not node.id or self._is_ignored_image(node.id):
                return None
            title = node.title.strip() or node.id
            body = image_markup(image_filename(node.id))
            space = self._hub_space(self.context.image_space, "imageHubSpaceKey")
        else:
            return None

        self.ensure_page(space, title, body)
        return space.key, title

    def _is_ignored_image(self, image_id: str) -> bool:
        """Ignored ids match with or without the implied .png extension."""
        ignored = self.context.ignored_image_ids
        return image_id in ignored or image_filename(image_id) in ignored

    def ensure_page(self, space: SpaceRef, title: str, body: str) -> PageRecord:
        """Get or create the page titled ``title`` in ``space``, once per request.

        An existing page whose body differs is reused as is; the collision
        is logged.
        """
        key = (space.key or space.id, title)
        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                return cached

            page, created = self.pages.get_or_create_page(space.id, title, body)
            if not created and page.body and page.body != body:
                logger.warning(
                    f"Hub page '{title}' in space {key[0]} already exists with "
                    f"different content; reusing page {page.id}"
                )
            self._memo[key] = page
            return page

    def _hub_space(self, identifier: str, label: str) -> SpaceRef:
        if not identifier:
            raise ValidationError(f"Missing or invalid {label}/spaceId")
        with self._lock:
            cached = self._spaces.get(identifier)
            if cached is not None:
                return cached
            try:
                if identifier.isdigit():
                    space = self.pages.resolve_space(space_id=identifier)
                else:
                    space = self.pages.resolve_space(space_key=identifier)
            except SpaceNotFoundError as e:
                raise ValidationError(
                    f"Missing or invalid {label}/spaceId: {identifier}"
                ) from e
            self._spaces[identifier] = space
            return space
