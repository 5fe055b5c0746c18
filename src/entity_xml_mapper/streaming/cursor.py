"""Strict pull cursor over an XML document.

The cursor turns document text into a sequence of events that callers pull
one at a time with :meth:`XMLCursor.next`. It checks well-formedness as it
goes (balanced and matching tags, a single root element, valid names and
references, terminated comments, CDATA sections and processing instructions)
and raises :class:`~entity_xml_mapper.shared.errors.MalformedXMLError` with
the line and column of the offending construct.

Attributes on elements are read and checked but are otherwise not modeled.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple, Type

from entity_xml_mapper.shared import (
    Location,
    MalformedXMLError,
    ParseConfig,
    UnbalancedElementError,
    XMLError,
)

NAME_START_CHARS = "A-Za-z_:\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF\uFDF0-\uFFFD"
NAME_CHARS = NAME_START_CHARS + "\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"

NAME_PATTERN = re.compile(f"[{NAME_START_CHARS}][{NAME_CHARS}]*")
WHITESPACE_PATTERN = re.compile(r"[ \t\n]*")
REFERENCE_PATTERN = re.compile(r"&(#[0-9]+|#x[0-9A-Fa-f]+|[^;&<\s]*)(;?)")
INVALID_CHAR_PATTERN = re.compile("[\x00-\x08\x0B\x0C\x0E-\x1F\uFFFE\uFFFF]")
XML_DECLARATION_PATTERN = re.compile(r"<\?xml[ \t\n]")

PREDEFINED_ENTITIES: Dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}

MAX_CODEPOINT = 0x10FFFF


class EventType(Enum):
    """Kinds of events reported by the cursor."""

    START_DOCUMENT = auto()
    START_ELEMENT = auto()
    END_ELEMENT = auto()
    CHARACTERS = auto()
    COMMENT = auto()
    PROCESSING_INSTRUCTION = auto()
    END_DOCUMENT = auto()


@dataclass(frozen=True)
class XMLEvent:
    """Single cursor event.

    ``name`` holds the element tag for element events and the target for
    processing instructions. ``text`` holds decoded character data, comment
    text or processing instruction data.
    """

    type: EventType
    location: Location
    name: Optional[str] = None
    text: str = ""
    attributes: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_whitespace(self) -> bool:
        """Whether this is character data made only of XML white space."""
        return self.type == EventType.CHARACTERS and not self.text.strip(" \t\n\r")


def is_valid_name(name: str) -> bool:
    """Check whether ``name`` is a valid XML element name."""
    return bool(name) and NAME_PATTERN.fullmatch(name) is not None


class XMLCursor:
    """Pull cursor producing :class:`XMLEvent` objects from document text.

    The cursor starts positioned on the START_DOCUMENT event. Each call to
    :meth:`next` advances to the following event. Self-closing elements are
    reported as a START_ELEMENT immediately followed by an END_ELEMENT.

    Examples:
        >>> cursor = XMLCursor("<a>x</a>")
        >>> [e.type.name for e in cursor]
        ['START_ELEMENT', 'CHARACTERS', 'END_ELEMENT', 'END_DOCUMENT']
    """

    def __init__(self, text: str, config: Optional[ParseConfig] = None) -> None:
        """Initialize the cursor.

        Args:
            text: Complete document text
            config: Parse configuration supplying structural limits

        Raises:
            MalformedXMLError: If the XML declaration is malformed
        """
        self.config = config or ParseConfig()
        # Line ends are normalized before anything else, as XML requires
        self._text = text.replace("\r\n", "\n").replace("\r", "\n")
        self._pos = 0
        self._line = 1
        self._line_start = 0
        self._stack: List[str] = []
        self._pending_end: Optional[XMLEvent] = None
        self._seen_root = False

        self._event = XMLEvent(EventType.START_DOCUMENT, self._location())
        self._read_declaration()

    # Public API

    @property
    def event(self) -> XMLEvent:
        """The current event."""
        return self._event

    @property
    def event_type(self) -> EventType:
        return self._event.type

    @property
    def name(self) -> Optional[str]:
        return self._event.name

    @property
    def text(self) -> str:
        return self._event.text

    @property
    def location(self) -> Location:
        return self._event.location

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._stack)

    def has_next(self) -> bool:
        """Whether another event can be pulled."""
        return self._event.type != EventType.END_DOCUMENT

    def next(self) -> XMLEvent:
        """Advance to the next event and return it.

        Raises:
            MalformedXMLError: If the document is not well-formed
            XMLError: If the cursor is already at the end of the document
        """
        if not self.has_next():
            raise XMLError("No events after end of document", self._event.location)
        self._event = self._read_event()
        return self._event

    def __iter__(self) -> Iterator[XMLEvent]:
        while self.has_next():
            yield self.next()

    # Position tracking

    def _location(self, offset: Optional[int] = None) -> Location:
        """Location of ``offset`` (default: current position).

        Offsets before the current position are not supported.
        """
        if offset is None or offset == self._pos:
            return Location(self._line, self._pos - self._line_start + 1, self._pos)
        newlines = self._text.count("\n", self._pos, offset)
        if newlines:
            line_start = self._text.rfind("\n", self._pos, offset) + 1
            return Location(self._line + newlines, offset - line_start + 1, offset)
        return Location(self._line, offset - self._line_start + 1, offset)

    def _advance_to(self, offset: int) -> None:
        newlines = self._text.count("\n", self._pos, offset)
        if newlines:
            self._line += newlines
            self._line_start = self._text.rfind("\n", self._pos, offset) + 1
        self._pos = offset

    def _error(
        self,
        message: str,
        offset: Optional[int] = None,
        error_class: Type[MalformedXMLError] = MalformedXMLError
    ) -> MalformedXMLError:
        return error_class(message, self._location(offset))

    def _startswith(self, prefix: str) -> bool:
        return self._text.startswith(prefix, self._pos)

    # Event production

    def _read_declaration(self) -> None:
        if not XML_DECLARATION_PATTERN.match(self._text):
            return
        end = self._text.find("?>")
        if end < 0:
            raise self._error("Unterminated XML declaration")
        content = self._text[5:end]
        pseudo = dict(re.findall(r"([a-z]+)\s*=\s*[\"']([^\"']*)[\"']", content))
        if "version" not in pseudo:
            raise self._error("XML declaration must specify a version")
        if not re.fullmatch(r"1\.[0-9]+", pseudo["version"]):
            raise self._error(f"Unsupported XML version: {pseudo['version']}")
        self._advance_to(end + 2)

    def _read_event(self) -> XMLEvent:
        if self._pending_end is not None:
            event, self._pending_end = self._pending_end, None
            self._stack.pop()
            return event

        while True:
            if self._pos >= len(self._text):
                return self._read_end_of_input()

            if not self._startswith("<"):
                return self._read_characters()
            if self._startswith("<!--"):
                return self._read_comment()
            if self._startswith("<![CDATA["):
                return self._read_cdata()
            if self._startswith("<!DOCTYPE"):
                self._skip_doctype()
                continue
            if self._startswith("<?"):
                return self._read_processing_instruction()
            if self._startswith("</"):
                return self._read_end_tag()
            return self._read_start_tag()

    def _read_end_of_input(self) -> XMLEvent:
        if self._stack:
            raise self._error(
                f"Unexpected end of document, <{self._stack[-1]}> element is not closed",
                error_class=UnbalancedElementError
            )
        if not self._seen_root:
            raise self._error("Document has no root element")
        return XMLEvent(EventType.END_DOCUMENT, self._location())

    def _read_characters(self) -> XMLEvent:
        start = self._pos
        end = self._text.find("<", start)
        if end < 0:
            end = len(self._text)
        raw = self._text[start:end]

        if not self._stack and raw.strip(" \t\n"):
            where = "after the root element" if self._seen_root else "in prolog"
            raise self._error(f"Content is not allowed {where}")
        self._check_chars(raw, start)
        cdata_end = raw.find("]]>")
        if cdata_end >= 0:
            raise self._error("Sequence ']]>' is not allowed in content", start + cdata_end)

        text = self._decode_references(raw, start)
        location = self._location()
        self._advance_to(end)
        return XMLEvent(EventType.CHARACTERS, location, text=text)

    def _read_comment(self) -> XMLEvent:
        start = self._pos
        end = self._text.find("-->", start + 4)
        if end < 0:
            raise self._error("Unterminated comment")
        content = self._text[start + 4:end]
        if "--" in content or content.endswith("-"):
            raise self._error("String '--' is not allowed in comments", start)
        self._check_chars(content, start + 4)
        location = self._location()
        self._advance_to(end + 3)
        return XMLEvent(EventType.COMMENT, location, text=content)

    def _read_cdata(self) -> XMLEvent:
        start = self._pos
        if not self._stack:
            raise self._error("CDATA section is not allowed outside the root element")
        end = self._text.find("]]>", start + 9)
        if end < 0:
            raise self._error("Unterminated CDATA section")
        content = self._text[start + 9:end]
        self._check_chars(content, start + 9)
        location = self._location()
        self._advance_to(end + 3)
        return XMLEvent(EventType.CHARACTERS, location, text=content)

    def _read_processing_instruction(self) -> XMLEvent:
        start = self._pos
        match = NAME_PATTERN.match(self._text, start + 2)
        if not match:
            raise self._error("Invalid processing instruction target", start + 2)
        target = match.group()
        if target.lower() == "xml":
            raise self._error("XML declaration is allowed only at the start of the document")
        end = self._text.find("?>", match.end())
        if end < 0:
            raise self._error("Unterminated processing instruction")
        data = self._text[match.end():end]
        if data and data[0] not in " \t\n":
            raise self._error("Invalid processing instruction target", start + 2)
        location = self._location()
        self._advance_to(end + 2)
        return XMLEvent(
            EventType.PROCESSING_INSTRUCTION, location, name=target, text=data.lstrip(" \t\n")
        )

    def _skip_doctype(self) -> None:
        if self._seen_root:
            raise self._error("DOCTYPE declaration is allowed only before the root element")
        if not self.config.allow_doctype:
            raise self._error("DOCTYPE declaration is not allowed")
        quote = None
        offset = self._pos + len("<!DOCTYPE")
        while offset < len(self._text):
            char = self._text[offset]
            if quote:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == "[":
                raise self._error("DOCTYPE internal subset is not supported", offset)
            elif char == ">":
                self._advance_to(offset + 1)
                return
            offset += 1
        raise self._error("Unterminated DOCTYPE declaration")

    def _read_start_tag(self) -> XMLEvent:
        start = self._pos
        match = NAME_PATTERN.match(self._text, start + 1)
        if not match:
            raise self._error("Invalid element name", start + 1)
        name = match.group()
        if not self._stack and self._seen_root:
            raise self._error(f"Extra content after the root element: <{name}>")
        if len(self._stack) >= self.config.max_depth:
            raise self._error(
                f"Maximum nesting depth of {self.config.max_depth} elements exceeded"
            )

        attributes: List[Tuple[str, str]] = []
        offset = match.end()
        while True:
            space = WHITESPACE_PATTERN.match(self._text, offset)
            offset = space.end()
            if offset >= len(self._text):
                raise self._error(f"Unexpected end of document in <{name}> start tag")
            if self._text.startswith("/>", offset):
                self_closing = True
                offset += 2
                break
            if self._text[offset] == ">":
                self_closing = False
                offset += 1
                break
            if space.start() == space.end():
                raise self._error(f"Malformed <{name}> start tag", offset)
            attr_name, value, offset = self._read_attribute(name, offset, attributes)
            attributes.append((attr_name, value))

        location = self._location()
        self._advance_to(offset)
        self._seen_root = True
        self._stack.append(name)
        event = XMLEvent(EventType.START_ELEMENT, location, name=name, attributes=tuple(attributes))
        if self_closing:
            self._pending_end = XMLEvent(EventType.END_ELEMENT, location, name=name)
        return event

    def _read_attribute(
        self, element: str, offset: int, seen: List[Tuple[str, str]]
    ) -> Tuple[str, str, int]:
        match = NAME_PATTERN.match(self._text, offset)
        if not match:
            raise self._error(f"Malformed <{element}> start tag", offset)
        attr_name = match.group()
        if any(attr_name == existing for existing, _ in seen):
            raise self._error(f"Duplicate attribute '{attr_name}' in <{element}>", offset)
        offset = WHITESPACE_PATTERN.match(self._text, match.end()).end()
        if not self._text.startswith("=", offset):
            raise self._error(f"Attribute '{attr_name}' has no value", offset)
        offset = WHITESPACE_PATTERN.match(self._text, offset + 1).end()
        if offset >= len(self._text):
            raise self._error(f"Unexpected end of document in <{element}> start tag")
        quote = self._text[offset]
        if quote not in "\"'":
            raise self._error(f"Value of attribute '{attr_name}' must be quoted", offset)
        end = self._text.find(quote, offset + 1)
        if end < 0:
            raise self._error(f"Unexpected end of document in <{element}> start tag")
        raw = self._text[offset + 1:end]
        if "<" in raw:
            raise self._error(
                f"Character '<' is not allowed in attribute '{attr_name}'",
                offset + 1 + raw.index("<")
            )
        self._check_chars(raw, offset + 1)
        return attr_name, self._decode_references(raw, offset + 1), end + 1

    def _read_end_tag(self) -> XMLEvent:
        start = self._pos
        match = NAME_PATTERN.match(self._text, start + 2)
        if not match:
            raise self._error("Invalid end element name", start + 2)
        name = match.group()
        offset = WHITESPACE_PATTERN.match(self._text, match.end()).end()
        if offset >= len(self._text):
            raise self._error(f"Unexpected end of document in </{name}> end tag")
        if self._text[offset] != ">":
            raise self._error(f"Malformed </{name}> end tag", offset)
        if not self._stack:
            raise self._error(
                f"Unexpected end element </{name}>", error_class=UnbalancedElementError
            )
        if self._stack[-1] != name:
            raise self._error(
                f"End element </{name}> does not match start element <{self._stack[-1]}>",
                error_class=UnbalancedElementError
            )
        location = self._location()
        self._advance_to(offset + 1)
        self._stack.pop()
        return XMLEvent(EventType.END_ELEMENT, location, name=name)

    # Content helpers

    def _check_chars(self, raw: str, offset: int) -> None:
        invalid = INVALID_CHAR_PATTERN.search(raw)
        if invalid:
            raise self._error(
                f"Invalid XML character U+{ord(invalid.group()):04X}",
                offset + invalid.start()
            )

    def _decode_references(self, raw: str, offset: int) -> str:
        if "&" not in raw:
            return raw

        def replace(match: "re.Match[str]") -> str:
            body, semicolon = match.group(1), match.group(2)
            where = offset + match.start()
            if not semicolon:
                raise self._error("Entity reference must end with ';'", where)
            if body.startswith("#"):
                try:
                    codepoint = int(body[2:], 16) if body[1:2] == "x" else int(body[1:])
                except ValueError:
                    codepoint = -1
                if codepoint <= 0 or codepoint > MAX_CODEPOINT:
                    raise self._error(f"Invalid character reference &{body};", where)
                char = chr(codepoint)
                if INVALID_CHAR_PATTERN.match(char) or 0xD800 <= codepoint <= 0xDFFF:
                    raise self._error(f"Invalid character reference &{body};", where)
                return char
            if body not in PREDEFINED_ENTITIES:
                raise self._error(f"Undefined entity reference &{body};", where)
            return PREDEFINED_ENTITIES[body]

        return REFERENCE_PATTERN.sub(replace, raw)


class CursorFactory:
    """Creates cursors for documents.

    A factory holds no per-document state, so one instance may be shared by
    any number of threads.
    """

    def __init__(self, config: Optional[ParseConfig] = None) -> None:
        self.config = config or ParseConfig()

    def create_cursor(self, text: str, config: Optional[ParseConfig] = None) -> XMLCursor:
        """Create a cursor positioned at the start of ``text``."""
        return XMLCursor(text, config or self.config)


DEFAULT_CURSOR_FACTORY = CursorFactory()
