"""Confluence storage-format parsing and construct builders."""

from .parser import parse_markup, serialize
from .constructs import (
    MACRO_TAG,
    page_link,
    url_link,
    anchor_link,
    anchor_macro,
    include_macro,
    task_list,
    expand_markup,
    image_markup,
    item_reference_markup,
)

__all__ = [
    'parse_markup',
    'serialize',
    'MACRO_TAG',
    'page_link',
    'url_link',
    'anchor_link',
    'anchor_macro',
    'include_macro',
    'task_list',
    'expand_markup',
    'image_markup',
    'item_reference_markup',
]
