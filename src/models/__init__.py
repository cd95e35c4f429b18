"""Data models for Confluence pages and spaces."""

from src.models.page_record import PageRecord, SpaceRef

__all__ = ['PageRecord', 'SpaceRef']
