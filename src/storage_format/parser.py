"""Parse storage-format markup into an editable tree and serialize it back.

Every transformation stage edits the same BeautifulSoup tree; markup is parsed
once per page body and serialized once at the end. Re-parsing serialized
output is avoided because CDATA sections do not survive a round trip through
``html.parser`` on every Python version.
"""

import logging

from bs4 import BeautifulSoup

from src.confluence_client.errors import TransformError

logger = logging.getLogger(__name__)

PARSER = "html.parser"


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse storage-format (XHTML with ac:/ri: tags) into a soup.

    Args:
        markup: Markup text; namespaced tag names are kept as written

    Returns:
        BeautifulSoup tree

    Raises:
        TransformError: If the markup cannot be parsed
    """
    try:
        return BeautifulSoup(markup or "", PARSER)
    except Exception as e:
        logger.debug(f"Markup parse failed: {e}")
        raise TransformError(f"Could not parse markup: {e}") from e


def serialize(soup: BeautifulSoup) -> str:
    """Serialize a soup back to storage-format text.

    Raises:
        TransformError: If the tree cannot be serialized
    """
    try:
        return soup.decode(formatter="minimal")
    except Exception as e:
        raise TransformError(f"Could not serialize markup: {e}") from e
