"""Tooltip content from the export's external information."""

import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup

from src.knowledge_tree.indexer import TreeIndex
from src.knowledge_tree.models import ExternalInformation
from src.storage_format.constructs import image_markup, page_link

from .models import ResolutionContext
from .shared_content import SharedContentHub, image_filename

logger = logging.getLogger(__name__)

IMAGE_INFORMATION_TYPE = "Image / screenshot"


def build_info_lookup(index: TreeIndex) -> Dict[str, ExternalInformation]:
    """Map external ids to information entries.

    An entry is keyed by its own external id; entries without one are keyed
    by the id of the node carrying them. The first entry per key wins.
    """
    lookup: Dict[str, ExternalInformation] = {}
    for node in index.nodes:
        for entry in node.external_information:
            key = entry.key or node.id
            if key and key not in lookup:
                lookup[key] = entry
    return lookup


def tooltip_content(
    external_id: str, lookup: Dict[str, ExternalInformation]
) -> Optional[str]:
    """Markup shown for an external id.

    Image entries become an image embed of the ``<img itemid=...>`` they
    contain; other entries pass their markup through.

    Returns:
        Markup, or None when the id is unknown or an image entry has no image
    """
    entry = lookup.get(external_id)
    if entry is None:
        return None

    content = entry.text()
    if entry.information_type == IMAGE_INFORMATION_TYPE:
        image = BeautifulSoup(content, "html.parser").find("img", attrs={"itemid": True})
        if image is None:
            return None
        return image_markup(image_filename(str(image["itemid"])))
    return content


class TooltipRewriter:
    """Turn ``data-externalid`` elements into links to tooltip pages."""

    def __init__(self, hub: SharedContentHub, context: ResolutionContext):
        self.hub = hub
        self.context = context

    def rewrite(self, soup: BeautifulSoup) -> int:
        rewritten = 0
        for element in soup.find_all(attrs={"data-externalid": True}):
            external_id = str(element["data-externalid"]).strip()
            content = tooltip_content(external_id, self.context.info_lookup)
            if not content:
                logger.debug(f"No tooltip content for external id {external_id}")
                continue

            text = element.get_text().strip()
            title = text or external_id
            self.hub.ensure_page(self.context.space, title, content)
            element.replace_with(
                page_link(soup, title, self.context.space.key, text or title)
            )
            rewritten += 1
        return rewritten
