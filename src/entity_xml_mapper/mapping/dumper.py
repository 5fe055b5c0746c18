"""Writing entity values through an :class:`XMLWriter`."""

from typing import TYPE_CHECKING, Optional, TypeVar

from entity_xml_mapper.shared import get_logger
from entity_xml_mapper.streaming import XMLWriter

if TYPE_CHECKING:
    from .entity import Entity

T = TypeVar("T")
B = TypeVar("B")


class XMLDumper:
    """Element-level writer and entity walker over one writer.

    Properties are written in declaration order; the values of a repeatable
    property are written in the order its getter yields them.
    """

    def __init__(self, writer: XMLWriter, correlation_id: Optional[str] = None) -> None:
        self.writer = writer
        self.logger = get_logger(__name__, correlation_id, "entity_dumper")

    def dump_start_element(self, tag: str) -> None:
        self.writer.write_start_element(tag)

    def dump_end_element(self) -> None:
        self.writer.write_end_element()

    def dump_text(self, text: str) -> None:
        self.writer.write_text(text)

    def dump_entity(self, entity: "Entity[T, B]", value: T) -> None:
        """Write ``value`` as one element of ``entity``."""
        self.dump_start_element(entity.tag)
        for prop in entity.properties:
            for item in prop.get_values(value):
                prop.dump(self, item)
        self.dump_end_element()
        if self.logger.is_debug_enabled:
            self.logger.debug(
                "Entity dumped",
                extra={"entity": entity.tag, "depth": self.writer.depth}
            )

    def dump_document(self, entity: "Entity[T, B]", value: T) -> None:
        """Write a complete document whose root element is ``value``."""
        self.writer.write_start_document()
        self.dump_entity(entity, value)
        self.writer.write_end_document()
