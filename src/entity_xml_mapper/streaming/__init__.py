"""Streaming layer for entity XML mapping.

This module provides the strict pull cursor used when reading documents and
the writer used when producing them.
"""

from .cursor import (
    DEFAULT_CURSOR_FACTORY,
    CursorFactory,
    EventType,
    XMLCursor,
    XMLEvent,
    is_valid_name,
)
from .writer import XMLWriter, escape_text

__all__ = [
    "DEFAULT_CURSOR_FACTORY",
    "CursorFactory",
    "EventType",
    "XMLCursor",
    "XMLEvent",
    "is_valid_name",
    "XMLWriter",
    "escape_text",
]
