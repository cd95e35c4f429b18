"""Page operations for publishing migrated content to Confluence.

This module provides the PageOperations class that resolves target spaces and
creates or updates pages in storage format, using version-stamped updates
(read current version, write version + 1).
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..confluence_client.api_wrapper import APIWrapper
from ..confluence_client.auth import Authenticator
from ..confluence_client.errors import (
    APIAccessError,
    PageNotFoundError,
    SpaceNotFoundError,
    ValidationError,
)
from ..models.page_record import PageRecord, SpaceRef
from .models import PublicationState, PublishAction, PublishResult

logger = logging.getLogger(__name__)

DEFAULT_VERSION_MESSAGE = "Updated via Knosys → Confluence migration"


class PageOperations:
    """Create, update and look up pages for one migration request.

    Create does no existence check; callers that need idempotency use
    get_or_create_page or consult the mapping store first. Update reads the
    page to learn its version and writes version + 1; the read-then-write is
    not atomic and a concurrent writer surfaces as VersionConflictError.

    Every page id created or updated is appended to ``committed`` so that a
    failed request can report what it already wrote.

    Usage:
        ops = PageOperations(api)
        space = ops.resolve_space(space_key="TEAM")
        result = ops.publish(space, "Home", "<p>Hello</p>")
    """

    def __init__(
        self,
        api: Optional[APIWrapper] = None,
        version_message: str = DEFAULT_VERSION_MESSAGE,
    ):
        """Initialize PageOperations with optional API wrapper.

        Args:
            api: APIWrapper instance. If None, creates one with
                 default authentication.
            version_message: Message stored with every update
        """
        if api is None:
            auth = Authenticator()
            api = APIWrapper(auth)
        self.api = api
        self.version_message = version_message
        self.committed: List[str] = []
        self._states: Dict[str, PublicationState] = {}
        self._spaces: Dict[Tuple[Optional[str], Optional[str]], SpaceRef] = {}
        self._lock = threading.Lock()

    def _record(self, page_id: str, state: PublicationState) -> None:
        with self._lock:
            if page_id not in self.committed:
                self.committed.append(page_id)
            self._states[page_id] = state

    def state_of(self, page_id: str) -> PublicationState:
        """Publication state of a page within this request."""
        with self._lock:
            return self._states.get(page_id, PublicationState.UNPUBLISHED)

    def resolve_space(
        self,
        space_id: Optional[str] = None,
        space_key: Optional[str] = None,
    ) -> SpaceRef:
        """Resolve a space to both its numeric id and its key.

        A non-numeric ``space_id`` is treated as a key. Results are memoized
        for the lifetime of this object.

        Raises:
            ValidationError: If neither identifier is given
            SpaceNotFoundError: If the key does not match any space
        """
        if space_id and not str(space_id).isdigit():
            space_key, space_id = space_key or str(space_id), None
        if not space_id and not space_key:
            raise ValidationError(
                "Missing or invalid spaceId/spaceKey in payload"
            )

        cache_key = (str(space_id) if space_id else None, space_key or None)
        with self._lock:
            cached = self._spaces.get(cache_key)
        if cached is not None:
            return cached

        if space_id:
            data = self.api.get_space_by_id(str(space_id))
            space = SpaceRef(id=str(space_id), key=space_key or data.get("key", ""))
        else:
            data = self.api.get_space_by_key(space_key)
            if not data or not data.get("id"):
                raise SpaceNotFoundError(space_key)
            space = SpaceRef(id=str(data["id"]), key=data.get("key") or space_key)

        logger.debug(f"Resolved space {space.key or '?'} to id {space.id}")
        with self._lock:
            self._spaces[cache_key] = space
        return space

    def get_page(self, page_id: str) -> PageRecord:
        """Fetch a page with its storage body.

        Raises:
            PageNotFoundError: If the page does not exist
            APIAccessError: If no identity could read it
        """
        return PageRecord.from_api(self.api.get_page_by_id(page_id))

    def get_page_if_exists(self, page_id: str) -> Optional[PageRecord]:
        """Fetch a page, returning None when every identity gets a 404.

        Used to verify page ids remembered from earlier runs.
        """
        try:
            return self.get_page(page_id)
        except PageNotFoundError:
            return None
        except APIAccessError as e:
            if e.attempts and all(a.status == 404 for a in e.attempts):
                return None
            raise

    def find_page(self, space_id: str, title: str) -> Optional[PageRecord]:
        """Find a page by exact title within a space."""
        data = self.api.find_page_by_title(space_id, title)
        return PageRecord.from_api(data) if data else None

    def create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        parent_id: Optional[str] = None,
        placeholder: bool = False,
    ) -> PageRecord:
        """Create a page.

        Args:
            space_id: Numeric id of the target space
            title: Page title
            body: Storage-format body
            parent_id: Parent page ID. None for space root.
            placeholder: Whether the body is a forward-reference stub

        Returns:
            The created page
        """
        logger.debug(f"Creating page: {title} in space {space_id}")
        if parent_id:
            logger.debug(f"  Parent: {parent_id}")

        record = PageRecord.from_api(
            self.api.create_page(space_id, title, body, parent_id=parent_id)
        )
        if not record.body:
            record.body = body

        self._record(
            record.id,
            PublicationState.PLACEHOLDER_CREATED if placeholder else PublicationState.POPULATED,
        )
        logger.info(f"Created page '{title}' ({record.id})")
        return record

    def update_page(
        self,
        page_id: str,
        space_id: str,
        title: str,
        body: str,
    ) -> PageRecord:
        """Replace a page's title and body, bumping its version by one.

        Raises:
            PageNotFoundError: If the page does not exist
            VersionConflictError: If another writer bumped the version first
        """
        current = self.get_page(page_id)
        new_version = current.version + 1
        logger.debug(
            f"Updating page {page_id}: version {current.version} -> {new_version}"
        )

        record = PageRecord.from_api(
            self.api.update_page(
                page_id,
                space_id,
                title,
                body,
                version_number=new_version,
                message=self.version_message,
            )
        )
        if not record.body:
            record.body = body

        self._record(record.id, PublicationState.POPULATED)
        logger.info(f"Updated page '{title}' ({record.id}) to version {record.version}")
        return record

    def get_or_create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        placeholder: bool = False,
    ) -> Tuple[PageRecord, bool]:
        """Return the page titled ``title`` in the space, creating it if absent.

        Returns:
            Tuple of (page, created)
        """
        existing = self.find_page(space_id, title)
        if existing is not None:
            logger.debug(f"Reusing page '{title}' ({existing.id})")
            return existing, False
        return self.create_page(space_id, title, body, placeholder=placeholder), True

    def publish(
        self,
        space: SpaceRef,
        title: str,
        body: str,
        page_id: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> PublishResult:
        """Create or update the target page of a migration.

        Logic:
        - page_id given → update (parent_id ignored)
        - page_id is None → create under parent_id
        """
        if page_id:
            page = self.update_page(str(page_id), space.id, title, body)
            return PublishResult(action=PublishAction.UPDATED, page=page)

        page = self.create_page(space.id, title, body, parent_id=parent_id)
        return PublishResult(action=PublishAction.CREATED, page=page)
