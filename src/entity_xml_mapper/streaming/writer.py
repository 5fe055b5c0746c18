"""Streaming XML writer.

Writes elements and character data to a text sink, escaping content and
keeping track of open elements. When an indent is configured, elements that
contain only child elements are laid out one child per line; elements with
character data are written inline so their text is never altered.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, TextIO

from entity_xml_mapper.shared import DumpConfig, XMLError

from .cursor import INVALID_CHAR_PATTERN, is_valid_name

ESCAPE_PATTERN = re.compile("[&<>\r]")
ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", "\r": "&#13;"}


def escape_text(text: str) -> str:
    """Escape character data for use as element content.

    Raises:
        XMLError: If the text contains characters XML cannot represent
    """
    invalid = INVALID_CHAR_PATTERN.search(text)
    if invalid:
        raise XMLError(
            f"Character U+{ord(invalid.group()):04X} cannot be represented in XML"
        )
    return ESCAPE_PATTERN.sub(lambda m: ESCAPES[m.group()], text)


@dataclass
class _OpenElement:
    tag: str
    has_children: bool = False
    has_text: bool = False


class XMLWriter:
    """Writes one XML document to a text sink."""

    def __init__(self, sink: TextIO, config: Optional[DumpConfig] = None) -> None:
        self.sink = sink
        self.config = config or DumpConfig()
        self._open: List[_OpenElement] = []
        self._start_tag_pending = False
        self._root_written = False

    @property
    def depth(self) -> int:
        return len(self._open)

    def write_start_document(self) -> None:
        if self.config.xml_declaration:
            encoding = self.config.encoding.upper()
            self.sink.write(f'<?xml version="1.0" encoding="{encoding}"?>')
            self.sink.write(self.config.newline)

    def write_start_element(self, tag: str) -> None:
        """Open an element.

        Raises:
            XMLError: If the tag is not a valid name or a second root is started
        """
        if not is_valid_name(tag):
            raise XMLError(f"Invalid element name: {tag!r}")
        if self._open:
            parent = self._open[-1]
            self._close_start_tag()
            if self.config.pretty and not parent.has_text:
                self._write_line_break(len(self._open))
            parent.has_children = True
        elif self._root_written:
            raise XMLError(f"Document already has a root element, cannot start <{tag}>")

        self.sink.write(f"<{tag}")
        self._start_tag_pending = True
        self._root_written = True
        self._open.append(_OpenElement(tag))

    def write_text(self, text: str) -> None:
        """Write character data inside the current element."""
        if not self._open:
            raise XMLError("Character data is not allowed outside the root element")
        if not text:
            return
        escaped = escape_text(text)
        self._close_start_tag()
        self.sink.write(escaped)
        self._open[-1].has_text = True

    def write_end_element(self) -> str:
        """Close the current element and return its tag."""
        if not self._open:
            raise XMLError("No open element to close")
        element = self._open.pop()
        if self._start_tag_pending:
            self.sink.write("/>")
            self._start_tag_pending = False
            return element.tag
        if self.config.pretty and element.has_children and not element.has_text:
            self._write_line_break(len(self._open))
        self.sink.write(f"</{element.tag}>")
        return element.tag

    def write_end_document(self) -> None:
        if self._open:
            raise XMLError(f"Element <{self._open[-1].tag}> is not closed")
        if not self._root_written:
            raise XMLError("Document has no root element")
        if self.config.pretty:
            self.sink.write(self.config.newline)
        if hasattr(self.sink, "flush"):
            self.sink.flush()

    def _close_start_tag(self) -> None:
        if self._start_tag_pending:
            self.sink.write(">")
            self._start_tag_pending = False

    def _write_line_break(self, depth: int) -> None:
        self.sink.write(self.config.newline + (self.config.indent or "") * depth)
