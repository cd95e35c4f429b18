"""Data models for migration requests."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.confluence_client.errors import ValidationError


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class MigrationRequest:
    """One export tree to migrate, plus where to put it.

    Attributes:
        tree: Export JSON of the root node
        space_id: Numeric id of the target space
        space_key: Key of the target space (used when space_id is absent)
        page_id: Existing page to update instead of creating one
        title: Title override for the root page
        parent_id: Parent of the root page when it is created
        shared_space: Hub space key or id for shared paragraphs
        image_space: Hub space key or id for images
    """
    tree: Dict[str, Any]
    space_id: Optional[str] = None
    space_key: Optional[str] = None
    page_id: Optional[str] = None
    title: Optional[str] = None
    parent_id: Optional[str] = None
    shared_space: Optional[str] = None
    image_space: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "MigrationRequest":
        """Validate a request payload.

        Hub spaces default to the target space key, else its id.

        Raises:
            ValidationError: If the JSON tree or every space identifier is missing
        """
        if not isinstance(payload, dict):
            raise ValidationError('Missing JSON payload under "json"')

        tree = payload.get('json')
        if not isinstance(tree, dict) or not tree:
            raise ValidationError('Missing JSON payload under "json"')

        space_id = _optional_str(payload.get('spaceId'))
        space_key = _optional_str(payload.get('spaceKey'))
        if not space_id and not space_key:
            raise ValidationError('Missing or invalid spaceId/spaceKey in payload')

        default_hub = space_key or space_id
        return cls(
            tree=tree,
            space_id=space_id,
            space_key=space_key,
            page_id=_optional_str(payload.get('pageId')),
            title=_optional_str(payload.get('title')),
            parent_id=_optional_str(payload.get('createAsChildOf')),
            shared_space=_optional_str(payload.get('sharedParagraphSpaceKey')) or default_hub,
            image_space=_optional_str(payload.get('imageHubSpaceKey')) or default_hub,
        )


def error_response(message: str, committed: Optional[list] = None) -> Dict[str, Any]:
    """Uniform failure response; ``committed`` lists page ids already written."""
    return {'error': message, 'committed': list(committed or [])}
