"""Unit tests for reference_resolver.placeholders module."""

import logging

import pytest

from src.confluence_client.errors import ExternalServiceError
from src.knowledge_tree.indexer import build_index
from src.knowledge_tree.models import DocumentNode
from src.migration.mapping_store import InMemoryMappingStore
from src.models.page_record import SpaceRef
from src.page_operations.models import PublicationState
from src.page_operations.page_operations import PageOperations
from src.reference_resolver.models import PageReference, ReferenceState, ResolutionContext
from src.reference_resolver.placeholders import PlaceholderResolver, PlaceholderWorklist
from tests.fixtures.sample_trees import node, text_field
from tests.helpers.fake_page_store import FakePageStore

TREE = node("root", "Root", "Document", children=[
    node("a", "Alpha", "Document", children=[node("a1", fields=[text_field("<p>alpha body</p>")])]),
    node("b", "Beta", "Document", children=[node("b1", fields=[text_field("<p>beta body</p>")])]),
    node("empty", "Empty", "Document"),
])


def no_rewrite(markup):
    return markup, []


def make_resolver(store=None, mapping=None, rewrite=no_rewrite, **context_overrides):
    store = store or FakePageStore()
    context = ResolutionContext(
        index=build_index(DocumentNode.from_dict(TREE)),
        space=SpaceRef("10", "TEAM"),
        shared_space="TEAM",
        image_space="TEAM",
        root_id="root",
        **context_overrides,
    )
    pages = PageOperations(store)
    resolver = PlaceholderResolver(pages, mapping or InMemoryMappingStore(), context, rewrite, max_workers=2)
    return resolver, store, pages


class TestPlaceholderWorklist:
    """Test cases for PlaceholderWorklist."""

    def test_each_document_is_admitted_once(self):
        worklist = PlaceholderWorklist()
        assert worklist.add(PageReference("a", "Alpha")) is True
        assert worklist.add(PageReference("a", "Alpha again")) is False
        assert worklist.add_all([PageReference("a", "x"), PageReference("b", "Beta")]) == 1

    def test_take_batch_drains_queue_but_keeps_history(self):
        worklist = PlaceholderWorklist()
        worklist.add_all([PageReference("a", "Alpha"), PageReference("b", "Beta")])

        assert [r.node_id for r in worklist.take_batch()] == ["a", "b"]
        assert worklist.take_batch() == []
        assert worklist.add(PageReference("a", "Alpha")) is False
        assert len(worklist.references()) == 2


class TestStub:
    """Test cases for phase 1."""

    def test_creates_stub_with_placeholder_text(self):
        resolver, store, pages = make_resolver()
        reference = PageReference("a", "Alpha")

        page = resolver.stub(reference)

        assert store.body_of(page.id) == "<p>to be migrated</p>"
        assert reference.state is ReferenceState.STUBBED
        assert reference.page_id == page.id
        assert pages.state_of(page.id) is PublicationState.PLACEHOLDER_CREATED
        assert resolver.mapping_store.get("a") == page.id

    def test_reuses_page_found_by_title(self):
        store = FakePageStore()
        existing = store.add_page("10", "Alpha", "<p>old</p>")
        resolver, _, _ = make_resolver(store=store)

        page = resolver.stub(PageReference("a", "Alpha"))

        assert page.id == existing
        assert "create_page" not in store.calls

    def test_reuses_mapped_page(self):
        """The mapping store wins over the title lookup."""
        store = FakePageStore()
        mapped = store.add_page("10", "Renamed", "<p>old</p>")
        resolver, _, _ = make_resolver(store=store, mapping=InMemoryMappingStore({"a": mapped}))

        assert resolver.stub(PageReference("a", "Alpha")).id == mapped
        assert "find_page_by_title" not in store.calls

    def test_stale_mapping_is_replaced(self):
        """A mapped page that no longer exists is recreated and remapped."""
        mapping = InMemoryMappingStore({"a": "424242"})
        resolver, store, _ = make_resolver(mapping=mapping)

        page = resolver.stub(PageReference("a", "Alpha"))

        assert page.id != "424242"
        assert mapping.get("a") == page.id

    def test_escapes_placeholder_text(self):
        resolver, store, _ = make_resolver(placeholder_text="<later>")
        page = resolver.stub(PageReference("a", "Alpha"))
        assert store.body_of(page.id) == "<p>&lt;later&gt;</p>"


class TestBackfill:
    """Test cases for phase 2."""

    def test_backfills_deepest_descendant_content(self):
        resolver, store, pages = make_resolver()
        reference = PageReference("a", "Alpha")
        resolver.stub(reference)

        page = resolver.backfill(reference)

        assert store.body_of(page.id) == "<p>alpha body</p>"
        assert page.version == 2
        assert reference.state is ReferenceState.RESOLVED
        assert pages.state_of(page.id) is PublicationState.POPULATED

    def test_node_found_by_title_when_id_unknown(self):
        resolver, store, _ = make_resolver()
        reference = PageReference("unknown-id", "Beta")
        resolver.stub(reference)

        resolver.backfill(reference)

        assert store.body_of(reference.page_id) == "<p>beta body</p>"

    def test_empty_node_keeps_stub(self, caplog):
        resolver, store, _ = make_resolver()
        reference = PageReference("empty", "Empty")
        resolver.stub(reference)

        with caplog.at_level(logging.WARNING):
            assert resolver.backfill(reference) is None

        assert store.body_of(reference.page_id) == "<p>to be migrated</p>"
        assert reference.state is ReferenceState.STUBBED
        assert "no content" in caplog.text

    def test_rewritten_content_is_written(self):
        """Backfill content goes through the fragment rewriter."""
        resolver, store, _ = make_resolver(rewrite=lambda markup: (markup.upper(), []))
        reference = PageReference("a", "Alpha")
        resolver.stub(reference)
        resolver.backfill(reference)

        assert store.body_of(reference.page_id) == "<P>ALPHA BODY</P>"


class TestResolve:
    """Test cases for the worklist loop."""

    def test_discovered_references_join_the_worklist(self):
        """Documents found while backfilling are stubbed and backfilled too."""
        def rewrite(markup):
            if "alpha" in markup:
                return markup, [PageReference("b", "Beta"), PageReference("root", "Root")]
            return markup, []

        resolver, store, _ = make_resolver(rewrite=rewrite)
        references = resolver.resolve([PageReference("a", "Alpha")])

        assert [r.node_id for r in references] == ["a", "b"]
        assert all(r.state is ReferenceState.RESOLVED for r in references)
        assert store.pages_titled("Root") == []

    def test_cycles_terminate(self):
        """a -> b -> a is processed once per document."""
        def rewrite(markup):
            if "alpha" in markup:
                return markup, [PageReference("b", "Beta")]
            return markup, [PageReference("a", "Alpha")]

        resolver, store, _ = make_resolver(rewrite=rewrite)
        references = resolver.resolve([PageReference("a", "Alpha")])

        assert len(references) == 2
        assert len(store.pages_titled("Alpha")) == 1
        assert len(store.pages_titled("Beta")) == 1

    def test_same_title_is_stubbed_once(self):
        """Two documents published under one title share one page."""
        resolver, store, _ = make_resolver()
        resolver.resolve([PageReference("a", "Shared"), PageReference("b", "Shared")])
        assert len(store.pages_titled("Shared")) == 1

    def test_failure_propagates_and_keeps_committed(self):
        """The first failure aborts; stubs already written stay committed."""
        store = FakePageStore()

        def failing_update(page_id, *args, **kwargs):
            raise ExternalServiceError(f"update_page({page_id})", 500, "boom")

        store.update_page = failing_update
        resolver, _, pages = make_resolver(store=store)

        with pytest.raises(ExternalServiceError):
            resolver.resolve([PageReference("a", "Alpha")])

        assert len(pages.committed) == 1
