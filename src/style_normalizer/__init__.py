"""Style and structure normalization for Confluence storage format."""

from .normalizer import (
    StyleNormalizer,
    convert_units,
    rgb_to_hex,
    parse_style,
    format_style,
)
from .task_lists import TaskListConverter

__all__ = [
    'StyleNormalizer',
    'TaskListConverter',
    'convert_units',
    'rgb_to_hex',
    'parse_style',
    'format_style',
]
