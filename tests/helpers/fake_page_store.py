"""In-memory stand-in for APIWrapper.

FakePageStore exposes the same page and space methods as APIWrapper and
returns REST v2 shaped dicts, so PageOperations and the migration pipeline
can be exercised end to end without a Confluence instance.
"""

import itertools
import threading
from typing import Any, Dict, Iterator, List, Optional

from src.confluence_client.errors import (
    PageNotFoundError,
    SpaceNotFoundError,
    VersionConflictError,
)

BASE_URL = "https://test.atlassian.net/wiki"


class FakePageStore:
    """Thread-safe page store keyed by page id.

    Attributes:
        spaces: Space dicts keyed by id
        pages: Page dicts keyed by id
        calls: Names of every method called, in order
    """

    def __init__(self, spaces: Optional[List[Dict[str, str]]] = None, first_page_id: int = 1000):
        self.spaces: Dict[str, Dict[str, str]] = {
            s["id"]: dict(s) for s in (spaces or [{"id": "10", "key": "TEAM", "name": "Team"}])
        }
        self.pages: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(first_page_id)
        self._lock = threading.Lock()

    def _log(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)

    def _view(self, page: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": page["id"],
            "title": page["title"],
            "spaceId": page["spaceId"],
            "parentId": page.get("parentId"),
            "version": {"number": page["version"], "message": page.get("message", "")},
            "body": {"storage": {"representation": "storage", "value": page["body"]}},
            "_links": {"webui": f"/spaces/{page['spaceId']}/pages/{page['id']}", "base": BASE_URL},
        }

    def add_page(self, space_id: str, title: str, body: str = "", version: int = 1) -> str:
        """Seed a page directly, bypassing call recording."""
        with self._lock:
            page_id = str(next(self._ids))
            self.pages[page_id] = {
                "id": page_id, "title": title, "spaceId": str(space_id),
                "body": body, "version": version,
            }
        return page_id

    def pages_titled(self, title: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [p for p in self.pages.values() if p["title"] == title]

    def body_of(self, page_id: str) -> str:
        with self._lock:
            return self.pages[page_id]["body"]

    def list_spaces(self, limit: int = 50) -> Iterator[Dict[str, Any]]:
        self._log("list_spaces")
        for space in list(self.spaces.values()):
            yield {"id": space["id"], "key": space["key"], "name": space.get("name")}

    def get_space_by_key(self, space_key: str) -> Optional[Dict[str, Any]]:
        self._log("get_space_by_key")
        for space in self.spaces.values():
            if space["key"] == space_key:
                return dict(space)
        return None

    def get_space_by_id(self, space_id: str) -> Dict[str, Any]:
        self._log("get_space_by_id")
        if str(space_id) not in self.spaces:
            raise SpaceNotFoundError(str(space_id))
        return dict(self.spaces[str(space_id)])

    def get_page_by_id(self, page_id: str) -> Dict[str, Any]:
        self._log("get_page_by_id")
        with self._lock:
            page = self.pages.get(str(page_id))
            if page is None:
                raise PageNotFoundError(page_id=str(page_id))
            return self._view(page)

    def find_page_by_title(self, space_id: str, title: str) -> Optional[Dict[str, Any]]:
        self._log("find_page_by_title")
        with self._lock:
            for page in self.pages.values():
                if page["spaceId"] == str(space_id) and page["title"] == title:
                    return self._view(page)
        return None

    def create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._log("create_page")
        with self._lock:
            page_id = str(next(self._ids))
            page = {
                "id": page_id, "title": title, "spaceId": str(space_id),
                "body": body, "version": 1, "parentId": parent_id,
            }
            self.pages[page_id] = page
            return self._view(page)

    def update_page(
        self,
        page_id: str,
        space_id: str,
        title: str,
        body: str,
        version_number: int,
        message: str = "",
    ) -> Dict[str, Any]:
        self._log("update_page")
        with self._lock:
            page = self.pages.get(str(page_id))
            if page is None:
                raise PageNotFoundError(page_id=str(page_id))
            if version_number != page["version"] + 1:
                raise VersionConflictError(str(page_id), version_number - 1)
            page.update(title=title, body=body, version=version_number, message=message)
            return self._view(page)
