"""Reading entity values from a cursor.

:class:`XMLParser` offers element-level primitives on top of
:class:`~entity_xml_mapper.streaming.cursor.XMLCursor` (used by properties,
including custom ones) and the entity matching algorithm.

Matching keeps a list of *pending* properties, initially all properties of
the entity in declaration order. The list is scanned from the start and the
first property that accepts the next child element parses it. A unique
property then leaves the list; either way the scan restarts from the start.
When no pending property accepts the next element the entity element must
end, and any mandatory property still pending is reported. Children may
therefore appear in any order, with repeated properties interleaved.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, TypeVar

from entity_xml_mapper.shared import (
    DuplicatePropertyError,
    Location,
    MandatoryPropertyError,
    MissingEndElementError,
    MissingStartElementError,
    UnexpectedTextError,
    get_logger,
)
from entity_xml_mapper.streaming import EventType, XMLCursor

if TYPE_CHECKING:
    from .entity import Entity
    from .property import Property

T = TypeVar("T")
B = TypeVar("B")

# Events that may appear anywhere without affecting the parse
SKIPPABLE_EVENTS = frozenset({EventType.COMMENT, EventType.PROCESSING_INSTRUCTION})


class XMLParser:
    """Element-level reader and entity matcher over one cursor.

    A parser belongs to a single parse call and must not be shared.
    """

    def __init__(self, cursor: XMLCursor, correlation_id: Optional[str] = None) -> None:
        self.cursor = cursor
        self.logger = get_logger(__name__, correlation_id, "entity_parser")

    @property
    def location(self) -> Location:
        """Location of the current cursor event."""
        return self.cursor.location

    def parse_text(self) -> str:
        """Read character data up to the next structural event.

        Comments and processing instructions are skipped; the text around
        them is joined.
        """
        parts: List[str] = []
        while True:
            event = self.cursor.event
            if event.type == EventType.CHARACTERS:
                parts.append(event.text)
            elif event.type not in SKIPPABLE_EVENTS:
                return "".join(parts)
            self.cursor.next()

    def _skip_white_space(self) -> None:
        while True:
            event = self.cursor.event
            if event.type == EventType.CHARACTERS:
                if not event.is_whitespace:
                    raise UnexpectedTextError("Expected white space", event.location)
            elif event.type not in SKIPPABLE_EVENTS:
                return
            self.cursor.next()

    def has_start_element(self, tag: Optional[str] = None) -> bool:
        """Whether the next structural event is a start element.

        Skips white space, comments and processing instructions first.

        Args:
            tag: When given, the start element must also carry this tag

        Raises:
            UnexpectedTextError: If non-whitespace text comes first
        """
        self._skip_white_space()
        if self.cursor.event_type != EventType.START_ELEMENT:
            return False
        return tag is None or self.cursor.name == tag

    def parse_start_element(self, tag: Optional[str] = None) -> str:
        """Consume a start element and return its tag.

        Raises:
            MissingStartElementError: If there is no matching start element
        """
        if not self.has_start_element(tag):
            expected = "a start element" if tag is None else f"<{tag}> start element"
            raise MissingStartElementError(f"Expected {expected}", self.location)
        name = self.cursor.name
        self.cursor.next()
        return name

    def parse_end_element(self, tag: str) -> None:
        """Consume the end element of ``tag``.

        Raises:
            MissingEndElementError: If anything else comes first, including
                a nested start element
        """
        self._skip_white_space()
        event = self.cursor.event
        if event.type != EventType.END_ELEMENT or event.name != tag:
            raise MissingEndElementError(f"Expected </{tag}> end element", event.location)
        self.cursor.next()

    def parse_start_document(self) -> None:
        self._skip_white_space()
        if self.cursor.event_type != EventType.START_DOCUMENT:
            raise MissingStartElementError("Expected start of document", self.location)
        self.cursor.next()

    def parse_end_document(self) -> None:
        self._skip_white_space()
        if self.cursor.event_type != EventType.END_DOCUMENT:
            raise MissingEndElementError("Expected end of document", self.location)

    def parse_entity(self, entity: "Entity[T, B]", builder: B) -> None:
        """Parse one element of ``entity`` into ``builder``.

        Raises:
            MissingStartElementError: If the element does not start here
            MissingEndElementError: If an unexpected child or text ends the
                element prematurely
            DuplicatePropertyError: If a unique property occurs twice
            MandatoryPropertyError: If a mandatory property never occurred
        """
        self.parse_start_element(entity.tag)

        pending: List["Property[T, B, Any]"] = list(entity.properties)
        consumed: Dict[str, "Property[T, B, Any]"] = {}
        index = 0
        while index < len(pending):
            prop = pending[index]
            location = self.location
            if prop.try_parse(self, builder):
                if self.logger.is_debug_enabled:
                    self.logger.debug(
                        "Property parsed",
                        extra={
                            "entity": entity.tag,
                            "property": prop.tag,
                            "kind": prop.kind.name,
                            "line": location.line,
                            "column": location.column,
                        }
                    )
                if prop.unique:
                    consumed[prop.tag] = pending.pop(index)
                index = 0
            else:
                index += 1

        if self.has_start_element() and self.cursor.name in consumed:
            raise DuplicatePropertyError(self.cursor.name, entity.tag, self.location)

        end_location = self.location
        self.parse_end_element(entity.tag)

        for prop in pending:
            if not prop.optional:
                raise MandatoryPropertyError(prop.tag, entity.tag, end_location)

    def parse_document(self, entity: "Entity[T, B]") -> T:
        """Parse a complete document whose root element is ``entity``."""
        builder = entity.new_builder()
        self.parse_start_document()
        self.parse_entity(entity, builder)
        self.parse_end_document()
        return entity.build(builder)
