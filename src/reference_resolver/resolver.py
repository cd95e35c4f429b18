"""Orchestrates every reference rewrite of one migration request."""

import logging
from typing import List, Tuple

from bs4 import BeautifulSoup

from src.confluence_client.errors import TransformError
from src.migration.mapping_store import MappingStore
from src.page_operations.page_operations import PageOperations
from src.storage_format.parser import parse_markup, serialize

from .link_rewriter import LinkRewriter
from .models import PageReference, ResolutionContext
from .placeholders import PlaceholderResolver
from .shared_content import SharedContentHub
from .tooltips import TooltipRewriter

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Rewrites references of the root document and resolves their targets.

    Usage:
        resolver = ReferenceResolver(pages, mapping_store, max_workers=4)
        references = resolver.resolve(soup, context)

    ``resolve`` edits ``soup`` in place: document and URL links, bookmark
    links and targets, include macros for shared content and tooltip links.
    It then stubs and backfills every referenced document.
    """

    def __init__(
        self,
        pages: PageOperations,
        mapping_store: MappingStore,
        max_workers: int = 4,
    ):
        self.pages = pages
        self.mapping_store = mapping_store
        self.max_workers = max_workers

    def resolve(
        self, soup: BeautifulSoup, context: ResolutionContext
    ) -> List[PageReference]:
        """Resolve every reference in ``soup``.

        Returns:
            All document references handled, including those discovered
            while backfilling

        Raises:
            ValidationError: If a hub space is missing
            ConfluenceError: On page store failures
        """
        links = LinkRewriter(context)
        hub = SharedContentHub(self.pages, context)
        tooltips = TooltipRewriter(hub, context)

        def rewrite(target: BeautifulSoup) -> List[PageReference]:
            references = links.rewrite(target)
            hub.rewrite(target)
            tooltips.rewrite(target)
            return references

        def rewrite_fragment(markup: str) -> Tuple[str, List[PageReference]]:
            try:
                fragment = parse_markup(markup)
                references = rewrite(fragment)
                return serialize(fragment), references
            except TransformError as e:
                logger.warning(f"Keeping backfill content unmodified: {e}")
                return markup, []

        references = rewrite(soup)
        links.insert_anchor_macros(soup)
        logger.info(f"Found {len(references)} referenced document(s)")

        placeholders = PlaceholderResolver(
            self.pages,
            self.mapping_store,
            context,
            rewrite_fragment,
            max_workers=self.max_workers,
        )
        return placeholders.resolve(references)
