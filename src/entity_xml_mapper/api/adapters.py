"""Integration adapter for lxml.

Converts entity values to and from ``lxml.etree`` elements so mapped data
can be combined with XPath queries, XSLT or other lxml tooling. lxml is an
optional dependency, imported only when a conversion runs.
"""

import time
from typing import Any, Dict, Optional, TypeVar

from entity_xml_mapper.mapping import Entity
from entity_xml_mapper.shared import MapperConfig, XMLError, get_logger

from .mapper import MS_PER_SECOND, dump_string, parse_string

T = TypeVar("T")
B = TypeVar("B")


class LxmlAdapter:
    """Bidirectional conversion between entity values and lxml.etree elements.

    Examples:
        >>> adapter = LxmlAdapter()
        >>> element = adapter.to_element(car_entity, car)
        >>> element.findtext("vin")
        '1A'
        >>> adapter.from_element(car_entity, element) == car
        True
    """

    def __init__(
        self,
        config: Optional[MapperConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = (config or MapperConfig()).override(dump__xml_declaration=False)
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "lxml_adapter")
        self._conversions: Dict[str, int] = {"to_element": 0, "from_element": 0}

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
            return True
        except ImportError:
            return False

    def to_element(self, entity: Entity[T, B], value: T) -> Any:
        """Convert an entity value to an ``lxml.etree._Element``.

        Raises:
            XMLError: If the value cannot be dumped
            ImportError: If lxml is not installed
        """
        import lxml.etree as ET

        start_time = time.time()
        xml_string = dump_string(entity, value, self.config, self.correlation_id)
        element = ET.fromstring(xml_string)
        self._record("to_element", entity, start_time)
        return element

    def from_element(self, entity: Entity[T, B], element: Any) -> T:
        """Parse an entity value from an ``lxml.etree._Element``.

        Raises:
            XMLError: If the element does not match the entity
            ImportError: If lxml is not installed
        """
        import lxml.etree as ET

        if not hasattr(element, "tag"):
            raise XMLError(f"Not an lxml element: {type(element).__name__}")
        start_time = time.time()
        xml_string = ET.tostring(element, encoding="unicode", with_tail=False)
        value = parse_string(entity, xml_string, self.config, self.correlation_id)
        self._record("from_element", entity, start_time)
        return value

    @property
    def statistics(self) -> Dict[str, int]:
        return dict(self._conversions)

    def _record(self, direction: str, entity: Entity[Any, Any], start_time: float) -> None:
        self._conversions[direction] += 1
        self.logger.debug(
            "lxml conversion completed",
            extra={
                "direction": direction,
                "entity": entity.tag,
                "conversion_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
