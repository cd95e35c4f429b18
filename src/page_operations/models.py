"""Data models for the publish engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..models.page_record import PageRecord


class PublicationState(Enum):
    """Lifecycle of a target page within one migration request."""

    UNPUBLISHED = "unpublished"
    PLACEHOLDER_CREATED = "placeholder_created"
    POPULATED = "populated"


class PublishAction(Enum):
    """Whether a publish call created or updated its page."""

    CREATED = "created"
    UPDATED = "updated"


@dataclass
class PublishResult:
    """Result of a publish call.

    Attributes:
        action: CREATED or UPDATED
        page: The page as returned by the store
    """

    action: PublishAction
    page: PageRecord

    def to_response(self) -> Dict[str, Any]:
        return {"ok": True, "action": self.action.value, "page": self.page.to_dict()}
