"""Two-phase resolution of links to documents that have no page yet.

Phase 1 (stub): every referenced document gets a page, found through the
mapping store, found by title, or created holding only the placeholder
marker. Phase 2 (backfill): the stub is updated with the content of the
referenced node's deepest descendant. Backfilled content is link-rewritten
in turn; documents it references join the same worklist.

The worklist is a visited set: a document id is queued once and processed
to completion once, so reference cycles terminate.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from html import escape
from typing import Callable, Deque, Dict, Iterable, List, Optional, Tuple

from src.migration.mapping_store import MappingStore
from src.models.page_record import PageRecord
from src.page_operations.page_operations import PageOperations

from .models import PageReference, ReferenceState, ResolutionContext

logger = logging.getLogger(__name__)

# Rewrites backfilled markup; returns the new markup and the references it found.
FragmentRewriter = Callable[[str], Tuple[str, List[PageReference]]]


class PlaceholderWorklist:
    """Pending document references, each admitted at most once."""

    def __init__(self):
        self._references: Dict[str, PageReference] = {}
        self._queue: Deque[PageReference] = deque()
        self._lock = threading.Lock()

    def add(self, reference: PageReference) -> bool:
        """Queue a reference unless its document was seen before."""
        with self._lock:
            if reference.node_id in self._references:
                return False
            self._references[reference.node_id] = reference
            self._queue.append(reference)
            return True

    def add_all(self, references: Iterable[PageReference]) -> int:
        return sum(1 for reference in references if self.add(reference))

    def take_batch(self) -> List[PageReference]:
        """Remove and return everything queued so far."""
        with self._lock:
            batch = list(self._queue)
            self._queue.clear()
            return batch

    def references(self) -> List[PageReference]:
        with self._lock:
            return list(self._references.values())


class PlaceholderResolver:
    """Stub and backfill referenced documents with bounded fan-out.

    Distinct documents are processed concurrently by up to ``max_workers``
    threads. Page operations on the same title are serialized by a per-title
    lock, so one request never creates the same stub twice. Concurrent
    requests are not coordinated beyond the mapping store lookup.
    """

    def __init__(
        self,
        pages: PageOperations,
        mapping_store: MappingStore,
        context: ResolutionContext,
        rewrite_fragment: FragmentRewriter,
        max_workers: int = 4,
    ):
        self.pages = pages
        self.mapping_store = mapping_store
        self.context = context
        self.rewrite_fragment = rewrite_fragment
        self.max_workers = max(1, max_workers)
        self.worklist = PlaceholderWorklist()
        self._title_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def stub_body(self) -> str:
        return f"<p>{escape(self.context.placeholder_text)}</p>"

    def _lock_for(self, title: str) -> threading.Lock:
        with self._locks_guard:
            return self._title_locks.setdefault(title, threading.Lock())

    def resolve(self, references: Iterable[PageReference]) -> List[PageReference]:
        """Run both phases for ``references`` and everything they lead to.

        Returns:
            Every reference admitted to the worklist, in admission order

        Raises:
            MigrationError: The first failure of any document; documents
                already committed stay committed
        """
        self.worklist.add_all(references)
        while True:
            batch = self.worklist.take_batch()
            if not batch:
                break
            logger.info(f"Resolving {len(batch)} referenced document(s)")
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {
                    executor.submit(self._process, reference): reference
                    for reference in batch
                }
                for future in as_completed(futures):
                    future.result()
        return self.worklist.references()

    def _process(self, reference: PageReference) -> None:
        self.stub(reference)
        self.backfill(reference)

    def stub(self, reference: PageReference) -> PageRecord:
        """Phase 1: make sure the referenced document has a page."""
        space_id = self.context.space.id
        with self._lock_for(reference.title):
            page = self._mapped_page(reference.node_id)
            if page is None:
                page = self.pages.find_page(space_id, reference.title)
            if page is None:
                page = self.pages.create_page(
                    space_id, reference.title, self.stub_body, placeholder=True
                )
                logger.info(f"Created placeholder '{reference.title}' ({page.id})")

            if self.mapping_store.get(reference.node_id) != page.id:
                self.mapping_store.put(reference.node_id, page.id)

        reference.page_id = page.id
        reference.state = ReferenceState.STUBBED
        return page

    def _mapped_page(self, node_id: str) -> Optional[PageRecord]:
        """Page recorded for ``node_id`` if it still exists."""
        page_id = self.mapping_store.get(node_id)
        if not page_id:
            return None
        page = self.pages.get_page_if_exists(page_id)
        if page is None:
            logger.info(f"Mapped page {page_id} for {node_id} is gone; ignoring mapping")
        return page

    def backfill(self, reference: PageReference) -> Optional[PageRecord]:
        """Phase 2: replace the stub's body with the document's content.

        The node is looked up by id, then by title. Without a node or
        without content the stub is left in place.
        """
        index = self.context.index
        node = index.get(reference.node_id) or index.find_by_title(reference.title)
        if node is None:
            logger.warning(f"No node found for '{reference.title}'; stub kept")
            return None

        content = node.deepest_descendant().joined_field_values()
        if not content:
            logger.warning(f"Node {reference.node_id} has no content; stub kept")
            return None

        body, discovered = self.rewrite_fragment(content)
        with self._lock_for(reference.title):
            page = self.pages.update_page(
                reference.page_id, self.context.space.id, reference.title, body
            )
        reference.state = ReferenceState.RESOLVED

        added = self.worklist.add_all(
            r for r in discovered if r.node_id != self.context.root_id
        )
        if added:
            logger.debug(f"'{reference.title}' references {added} more document(s)")
        return page
