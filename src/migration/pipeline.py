"""Migration request pipeline.

Index -> extract -> resolve references -> normalize styles -> publish.
Every failure is caught at the request boundary and returned as an error
response that also lists the pages already committed.
"""

import logging
from typing import Any, Dict, Optional

from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.auth import Authenticator
from src.confluence_client.errors import MigrationError, TransformError
from src.knowledge_tree.extractor import ContentExtractor
from src.knowledge_tree.indexer import build_index
from src.knowledge_tree.models import DocumentNode
from src.page_operations.models import PublishAction, PublishResult
from src.page_operations.page_operations import PageOperations
from src.reference_resolver.models import ResolutionContext
from src.reference_resolver.resolver import ReferenceResolver
from src.reference_resolver.tooltips import build_info_lookup
from src.storage_format.constructs import anchor_macro
from src.storage_format.parser import parse_markup, serialize
from src.style_normalizer.normalizer import StyleNormalizer

from .config import MigrationConfig
from .mapping_store import MappingStore, YamlMappingStore
from .models import MigrationRequest, error_response

logger = logging.getLogger(__name__)

NO_CONTENT_MARKUP = '<p>(no content extracted)</p>'
PAGE_TOP_ANCHOR = 'PageTop'


class MigrationPipeline:
    """Migrates export trees into Confluence pages.

    Usage:
        pipeline = MigrationPipeline(config=ConfigLoader.load())
        response = pipeline.migrate({"json": tree, "spaceKey": "TEAM"})
        # {"ok": True, "action": "created", "page": {...}}
        # or {"error": "...", "committed": ["123", ...]}
    """

    def __init__(
        self,
        api: Optional[APIWrapper] = None,
        config: Optional[MigrationConfig] = None,
        mapping_store: Optional[MappingStore] = None,
    ):
        self.config = config or MigrationConfig()
        self.api = api or APIWrapper(Authenticator())
        self.mapping_store = mapping_store or YamlMappingStore(self.config.mapping_file)
        self.extractor = ContentExtractor()
        self.normalizer = StyleNormalizer(self.config.class_colors)

    def migrate(self, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Run one migration request.

        Returns:
            ``{"ok": True, "action": "created"|"updated", "page": {...}}`` or
            ``{"error": message, "committed": [page ids]}``
        """
        pages = PageOperations(self.api, version_message=self.config.version_message)
        try:
            return self.run(payload, pages).to_response()
        except MigrationError as e:
            logger.error(f"Migration failed: {e}")
            return error_response(str(e), pages.committed)
        except Exception as e:
            logger.exception(f"Unexpected migration failure: {e}")
            return error_response(str(e) or type(e).__name__, pages.committed)

    def run(self, payload: Optional[Dict[str, Any]], pages: PageOperations) -> PublishResult:
        """Run one migration request, raising on failure."""
        request = MigrationRequest.from_payload(payload)
        space = pages.resolve_space(request.space_id, request.space_key)

        root = DocumentNode.from_dict(request.tree)
        index = build_index(root, self.config.duplicate_ids)
        logger.info(f"Migrating '{root.title or root.id}' ({len(index.nodes)} nodes)")

        markup = self.extractor.extract(root) or NO_CONTENT_MARKUP
        context = ResolutionContext(
            index=index,
            space=space,
            shared_space=request.shared_space or "",
            image_space=request.image_space or "",
            root_id=root.id,
            placeholder_text=self.config.placeholder_text,
            info_lookup=build_info_lookup(index),
            ignored_image_ids=frozenset(self.config.ignored_image_ids),
        )
        body = self.transform(markup, context, pages)
        title = self.title_for(request, root)

        page_id = request.page_id
        if not page_id and root.id:
            page_id = self._mapped_root_page(root.id, pages)

        result = pages.publish(
            space, title, body, page_id=page_id, parent_id=request.parent_id
        )
        if root.id and result.action is PublishAction.CREATED:
            self.mapping_store.put(root.id, result.page.id)

        logger.info(
            f"Page '{title}' {result.action.value} ({result.page.id}); "
            f"{len(pages.committed)} page(s) written"
        )
        return result

    def transform(
        self, markup: str, context: ResolutionContext, pages: PageOperations
    ) -> str:
        """Turn extracted markup into the final page body.

        Markup that cannot be parsed is published unmodified.
        """
        try:
            soup = parse_markup(markup)
        except TransformError as e:
            logger.warning(f"Publishing unmodified markup: {e}")
            return markup

        resolver = ReferenceResolver(
            pages, self.mapping_store, max_workers=self.config.max_workers
        )
        resolver.resolve(soup, context)
        self.normalizer.normalize(soup)
        soup.insert(0, anchor_macro(soup, PAGE_TOP_ANCHOR))

        try:
            return serialize(soup)
        except TransformError as e:
            logger.warning(f"Publishing unmodified markup: {e}")
            return markup

    def title_for(self, request: MigrationRequest, root: DocumentNode) -> str:
        """Root page title: request title, node title, DocumentTitle, default."""
        return (
            request.title
            or root.title.strip()
            or (root.document_title or "").strip()
            or self.config.default_title
        )

    def _mapped_root_page(self, root_id: str, pages: PageOperations) -> Optional[str]:
        page_id = self.mapping_store.get(root_id)
        if not page_id:
            return None
        if pages.get_page_if_exists(page_id) is None:
            logger.info(f"Mapped page {page_id} for {root_id} is gone; creating a new one")
            return None
        return page_id
