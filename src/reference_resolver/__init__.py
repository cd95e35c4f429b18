"""Cross-document reference resolution for migrated markup.

Key classes:
    ReferenceResolver: Runs every rewrite below plus placeholder resolution
    LinkRewriter: Document, URL and bookmark links; bookmark targets
    PlaceholderResolver: Two-phase stub/backfill of referenced documents
    SharedContentHub: Hub pages and include macros for shared content
    TooltipRewriter: Tooltip pages for external information
"""

from .models import PageReference, ReferenceState, ResolutionContext
from .link_rewriter import LinkRewriter, page_title_for
from .placeholders import PlaceholderResolver, PlaceholderWorklist
from .shared_content import SharedContentHub, image_filename
from .tooltips import TooltipRewriter, build_info_lookup, tooltip_content
from .resolver import ReferenceResolver

__all__ = [
    "ReferenceResolver",
    "LinkRewriter",
    "PlaceholderResolver",
    "PlaceholderWorklist",
    "SharedContentHub",
    "TooltipRewriter",
    "PageReference",
    "ReferenceState",
    "ResolutionContext",
    "build_info_lookup",
    "tooltip_content",
    "image_filename",
    "page_title_for",
]
