"""Convert HTML checkboxes into a Confluence task list."""

import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, CData, Comment, NavigableString, PageElement, Tag

from src.storage_format.constructs import task_list

logger = logging.getLogger(__name__)


def _is_text(node: Optional[PageElement]) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, (Comment, CData))


def _next_meaningful(node: PageElement) -> Optional[PageElement]:
    """Next sibling, skipping whitespace-only text."""
    sibling = node.next_sibling
    while _is_text(sibling) and not sibling.strip():
        sibling = sibling.next_sibling
    return sibling


class TaskListConverter:
    """Collects ``<input type="checkbox">`` + text pairs into one ``ac:task-list``.

    The list is inserted where the first converted checkbox was. Converted
    checkboxes, their text and a ``<br>`` directly after the text are removed;
    anything else (including checkboxes without text) is left alone.
    """

    def convert(self, soup: BeautifulSoup) -> int:
        items: List[Tuple[bool, str]] = []
        consumed: List[PageElement] = []
        anchor: Optional[Tag] = None

        for checkbox in soup.find_all('input', attrs={'type': 'checkbox'}):
            text = _next_meaningful(checkbox)
            if not _is_text(text):
                continue
            items.append((checkbox.has_attr('checked'), text.strip()))
            consumed.extend([checkbox, text])
            following = _next_meaningful(text)
            if isinstance(following, Tag) and following.name == 'br':
                consumed.append(following)
            if anchor is None:
                anchor = checkbox

        if anchor is None:
            return 0

        anchor.insert_before(task_list(soup, items))
        for node in consumed:
            node.extract()

        logger.debug(f"Converted {len(items)} checkbox(es) to a task list")
        return len(items)
