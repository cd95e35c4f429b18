"""Page record data model."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SpaceRef:
    """A resolved target space.

    Attributes:
        id: Numeric space id used by REST v2 page calls
        key: Space key used by storage-format link constructs
    """
    id: str
    key: str


@dataclass
class PageRecord:
    """Confluence page as returned by the REST v2 API.

    Attributes:
        id: Unique identifier for the page
        title: Page title
        space_id: Numeric id of the space where the page resides
        version: Current version number (required for updates)
        body: Page content in Confluence storage format (XHTML)
        webui: Relative link to the page in the web UI
        base: Absolute base URL of the Confluence instance
    """
    id: str
    title: str
    space_id: str
    version: int
    body: str = ""
    webui: Optional[str] = None
    base: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PageRecord":
        """Build a record from a REST v2 page payload."""
        body = data.get("body") or {}
        storage = body.get("storage") or {}
        links = data.get("_links") or {}
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            space_id=str(data.get("spaceId", "")),
            version=int((data.get("version") or {}).get("number", 1)),
            body=storage.get("value", ""),
            webui=links.get("webui"),
            base=links.get("base"),
        )

    @property
    def url(self) -> Optional[str]:
        """Absolute web UI link, when both link parts are known."""
        if self.base and self.webui:
            return f"{self.base}{self.webui}"
        return self.webui

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the shape returned by migration responses."""
        return {
            "id": self.id,
            "title": self.title,
            "spaceId": self.space_id,
            "version": {"number": self.version},
            "body": {"storage": {"value": self.body}},
            "_links": {"webui": self.webui, "base": self.base},
        }
