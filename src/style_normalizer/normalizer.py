"""Canonicalize inline styling and clean up the structure of migrated markup.

All transforms are deterministic edits of a BeautifulSoup tree:

- cm and pt lengths become px (1cm = 37.8px, 1pt = 1.333px, two decimals)
- ``rgb()``/``rgba()`` colors become 6-digit hex
- legacy color classes get an explicit ``color``
- background colors of table cells are mirrored to ``data-highlight-colour``
- tables lose explicit widths and get ``data-layout="default"``
- empty elements are pruned
- redundant same-tag wrappers are collapsed
"""

import logging
import re
from typing import Dict, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from src.storage_format.constructs import MACRO_TAG

from .task_lists import TaskListConverter

logger = logging.getLogger(__name__)

CM_TO_PX = 37.8
PT_TO_PX = 1.333

UNIT_PATTERN = re.compile(r'(\d+(?:\.\d+)?|\.\d+)\s*(cm|pt)\b', re.IGNORECASE)
RGB_PATTERN = re.compile(r'rgba?\(([^)]*)\)', re.IGNORECASE)
HEX_COLOR_PATTERN = re.compile(r'#[0-9a-fA-F]{6}\b')
COLOR_DECLARATION_PATTERN = re.compile(r'(^|;)\s*color\s*:', re.IGNORECASE)
WIDTH_DECLARATION_PATTERN = re.compile(r'(^|;)\s*width\s*:[^;]*;?', re.IGNORECASE)

VOID_TAGS = frozenset([
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
])
CELL_TAGS = ('td', 'th')
HIGHLIGHT_ATTRIBUTE = 'data-highlight-colour'
DEFAULT_CLASS_COLORS = {'alt3': 'red', 'alt2': 'green'}


def convert_units(style: str) -> str:
    """Convert every cm and pt length in a style string to px.

    >>> convert_units("10pt")
    '13.33px'
    >>> convert_units("1cm")
    '37.80px'
    """
    def replace(match: re.Match) -> str:
        value = float(match.group(1))
        ratio = CM_TO_PX if match.group(2).lower() == 'cm' else PT_TO_PX
        return f"{value * ratio:.2f}px"

    return UNIT_PATTERN.sub(replace, style)


def rgb_to_hex(value: str) -> str:
    """Convert every ``rgb(r,g,b)``/``rgba(r,g,b,a)`` in a string to hex.

    >>> rgb_to_hex("rgb(255,0,0)")
    '#ff0000'
    """
    def replace(match: re.Match) -> str:
        parts = [p.strip() for p in match.group(1).split(',')]
        if len(parts) < 3:
            return match.group(0)
        try:
            channels = [max(0, min(255, int(float(p)))) for p in parts[:3]]
        except ValueError:
            return match.group(0)
        return '#' + ''.join(f"{c:02x}" for c in channels)

    return RGB_PATTERN.sub(replace, value)


def parse_style(style: str) -> Dict[str, str]:
    """Split a style attribute into ordered declarations (lower-cased names)."""
    declarations: Dict[str, str] = {}
    for item in style.split(';'):
        if ':' not in item:
            continue
        name, value = item.split(':', 1)
        name = name.strip().lower()
        if name:
            declarations[name] = value.strip()
    return declarations


def format_style(declarations: Dict[str, str]) -> str:
    return '; '.join(f"{name}: {value}" for name, value in declarations.items())


def is_platform_tag(tag: Tag) -> bool:
    return tag.name.startswith(('ac:', 'ri:'))


class StyleNormalizer:
    """Applies every style and structure transform to a soup in place.

    Usage:
        normalizer = StyleNormalizer(class_colors={'alt3': 'red'})
        normalizer.normalize(soup)
    """

    def __init__(self, class_colors: Optional[Dict[str, str]] = None):
        self.class_colors = dict(DEFAULT_CLASS_COLORS if class_colors is None else class_colors)
        self.task_lists = TaskListConverter()

    def normalize(self, soup: BeautifulSoup) -> BeautifulSoup:
        self.task_lists.convert(soup)
        self.apply_class_colors(soup)
        self.normalize_styles(soup)
        self.clean_tables(soup)
        removed = self.prune_empty(soup)
        collapsed = self.collapse_wrappers(soup)
        logger.debug(f"Pruned {removed} empty element(s), collapsed {collapsed} wrapper(s)")
        return soup

    def apply_class_colors(self, soup: BeautifulSoup) -> None:
        """Give elements with a legacy color class an explicit text color."""
        for css_class, color in self.class_colors.items():
            for tag in soup.find_all(class_=css_class):
                style = tag.get('style', '').strip()
                if COLOR_DECLARATION_PATTERN.search(style):
                    continue
                if style and not style.endswith(';'):
                    style += ';'
                tag['style'] = f"{style} color: {color};".strip()

    def normalize_styles(self, soup: BeautifulSoup) -> None:
        """Convert units and colors; mirror cell backgrounds to the highlight attribute."""
        for tag in soup.find_all(style=True):
            declarations = parse_style(rgb_to_hex(convert_units(tag['style'])))

            background = declarations.get('background-color')
            if not background:
                match = HEX_COLOR_PATTERN.search(declarations.get('background', ''))
                background = match.group(0) if match else None

            if background:
                declarations['background-color'] = background
                if tag.name in CELL_TAGS:
                    tag[HIGHLIGHT_ATTRIBUTE] = background
                elif tag.has_attr(HIGHLIGHT_ATTRIBUTE):
                    del tag[HIGHLIGHT_ATTRIBUTE]

            if declarations:
                tag['style'] = format_style(declarations)
            else:
                del tag['style']

    def clean_tables(self, soup: BeautifulSoup) -> None:
        """Strip explicit table widths and set the default layout."""
        for table in soup.find_all('table'):
            if table.has_attr('width'):
                del table['width']
            if table.has_attr('style'):
                style = WIDTH_DECLARATION_PATTERN.sub(r'\1', table['style'])
                style = style.strip().strip(';').strip()
                if style:
                    table['style'] = style
                else:
                    del table['style']
            table['data-layout'] = 'default'

    def _is_prunable(self, tag: Tag) -> bool:
        if tag.name in VOID_TAGS or tag.name in CELL_TAGS or is_platform_tag(tag):
            return False
        if tag.name == 'a' and (tag.has_attr('name') or tag.has_attr('id')):
            return False
        if tag.find(MACRO_TAG) is not None:
            return False
        return not tag.find(True) and not tag.get_text().strip()

    def prune_empty(self, soup: BeautifulSoup) -> int:
        """Remove elements without visible text or element children.

        Runs in reverse document order so that a parent left empty by the
        removal of its children is removed as well.
        """
        removed = 0
        for tag in reversed(soup.find_all(True)):
            if self._is_prunable(tag):
                tag.decompose()
                removed += 1
        return removed

    def _sole_child(self, tag: Tag) -> Optional[Tag]:
        only: Optional[Tag] = None
        for child in tag.children:
            if isinstance(child, Tag):
                if only is not None:
                    return None
                only = child
            elif isinstance(child, NavigableString) and child.strip():
                return None
        return only

    def _merge_into(self, outer: Tag, inner: Tag) -> None:
        """Copy ``inner``'s attributes onto ``outer``; inner values win.

        Style declarations are merged one by one and classes are combined.
        """
        for name, value in inner.attrs.items():
            if name == 'style' and outer.has_attr('style'):
                declarations = parse_style(outer['style'])
                declarations.update(parse_style(value))
                outer['style'] = format_style(declarations)
            elif name == 'class' and outer.has_attr('class'):
                classes = list(outer['class'])
                classes.extend(c for c in value if c not in classes)
                outer['class'] = classes
            else:
                outer[name] = value

    def collapse_wrappers(self, soup: BeautifulSoup) -> int:
        """Unwrap same-tag nesting such as ``<span><span>x</span></span>``.

        The inner element is always the one dropped, after its attributes
        are merged into the outer one. Each unwrap removes one element, so
        the loop stops after at most one pass per element.
        """
        collapsed = 0
        changed = True
        while changed:
            changed = False
            for tag in soup.find_all(True):
                if tag.parent is None or is_platform_tag(tag):
                    continue
                inner = self._sole_child(tag)
                if inner is None or inner.name != tag.name:
                    continue
                self._merge_into(tag, inner)
                inner.unwrap()
                collapsed += 1
                changed = True
        return collapsed
