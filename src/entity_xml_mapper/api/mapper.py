"""Parse and dump API with progressive disclosure.

Module-level functions cover one-off calls; :class:`EntityMapper` binds an
entity to a configuration for repeated use and keeps call statistics.

Every failure is raised as an :class:`~entity_xml_mapper.shared.errors.XMLError`;
a partially built value is never returned.
"""

import io
import threading
import time
from pathlib import Path
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar, Union

from entity_xml_mapper.character import SinkType, SourceType, read_source, write_sink
from entity_xml_mapper.mapping import Entity, XMLDumper, XMLParser
from entity_xml_mapper.shared import (
    DEFAULT_CONFIG,
    MapperConfig,
    XMLError,
    XMLIOError,
    get_logger,
)
from entity_xml_mapper.streaming import DEFAULT_CURSOR_FACTORY, XMLWriter

T = TypeVar("T")
B = TypeVar("B")

MS_PER_SECOND = 1000  # Milliseconds per second conversion


def _resolve(
    config: Optional[MapperConfig], correlation_id: Optional[str]
) -> Tuple[MapperConfig, Optional[str]]:
    config = config or DEFAULT_CONFIG
    return config, correlation_id or config.correlation_id


def parse(
    entity: Entity[T, B],
    source: SourceType,
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> T:
    """Parse an entity value from any supported source.

    Args:
        entity: Entity describing the document's root element
        source: XML text, bytes, a Path, or a readable text or binary stream
        config: Optional mapper configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The finished value built from the document

    Raises:
        XMLError: If the document cannot be read, is malformed, or does not
            match the entity

    Examples:
        >>> car = parse(car_entity, "<car><vin>1A</vin><year>2004</year><engine/></car>")
        >>> car.year
        2004

        >>> car = parse(car_entity, Path("car.xml"))
    """
    config, correlation_id = _resolve(config, correlation_id)
    logger = get_logger(__name__, correlation_id, "parse")
    start_time = time.time()

    logger.info(
        "Starting parse operation",
        extra={"entity": entity.tag, "input_type": type(source).__name__}
    )

    try:
        text = read_source(source, config.parse.encoding, correlation_id)
        cursor = DEFAULT_CURSOR_FACTORY.create_cursor(text, config.parse)
        value = XMLParser(cursor, correlation_id).parse_document(entity)
    except XMLError as e:
        logger.error(
            "Parse operation failed",
            extra={
                "entity": entity.tag,
                "error_type": type(e).__name__,
                "error": e.message,
                "line": e.line,
                "column": e.column,
            }
        )
        raise

    logger.debug(
        "Parse operation completed",
        extra={
            "entity": entity.tag,
            "character_count": len(text),
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return value


def parse_string(
    entity: Entity[T, B],
    xml_string: str,
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> T:
    """Parse an entity value from XML text."""
    if not isinstance(xml_string, str):
        raise TypeError(f"Expected XML text, got {type(xml_string).__name__}")
    return parse(entity, xml_string, config, correlation_id)


def parse_file(
    entity: Entity[T, B],
    file_path: Union[str, Path],
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> T:
    """Parse an entity value from a file.

    The file's encoding is taken from ``config.parse.encoding`` or detected
    from its byte order mark and XML declaration.

    Raises:
        XMLIOError: If the file does not exist or cannot be read
    """
    path_obj = Path(file_path)
    if not path_obj.is_file():
        raise XMLIOError(f"File not found: {path_obj}")
    return parse(entity, path_obj, config, correlation_id)


def dump(
    entity: Entity[T, B],
    value: T,
    sink: SinkType,
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Dump an entity value to a Path or writable stream.

    The document is produced completely before anything is written, so a
    failing dump leaves the sink untouched.

    Raises:
        XMLError: If the value cannot be represented or the sink fails
    """
    config, correlation_id = _resolve(config, correlation_id)
    text = dump_string(entity, value, config, correlation_id)
    write_sink(sink, text, config.dump.encoding)


def dump_string(
    entity: Entity[T, B],
    value: T,
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Dump an entity value to XML text.

    Examples:
        >>> dump_string(engine_entity, engine, MapperConfig.compact())
        '<engine><fuel>diesel</fuel></engine>'
    """
    config, correlation_id = _resolve(config, correlation_id)
    logger = get_logger(__name__, correlation_id, "dump")
    start_time = time.time()

    logger.info("Starting dump operation", extra={"entity": entity.tag})

    buffer = io.StringIO()
    try:
        writer = XMLWriter(buffer, config.dump)
        XMLDumper(writer, correlation_id).dump_document(entity, value)
    except XMLError as e:
        logger.error(
            "Dump operation failed",
            extra={
                "entity": entity.tag,
                "error_type": type(e).__name__,
                "error": e.message,
            }
        )
        raise

    text = buffer.getvalue()
    logger.debug(
        "Dump operation completed",
        extra={
            "entity": entity.tag,
            "character_count": len(text),
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return text


def dump_file(
    entity: Entity[T, B],
    value: T,
    file_path: Union[str, Path],
    config: Optional[MapperConfig] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Dump an entity value to a file, replacing its contents."""
    dump(entity, value, Path(file_path), config, correlation_id)


class EntityMapper(Generic[T, B]):
    """Entity bound to a configuration, for repeated parse and dump calls.

    Attributes:
        entity: Entity of the document root
        config: Mapper configuration used for every call
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> mapper = EntityMapper(car_entity, MapperConfig.compact())
        >>> cars = [mapper.parse(xml) for xml in documents]
        >>> mapper.statistics["successful_parses"]
        3
    """

    def __init__(
        self,
        entity: Entity[T, B],
        config: Optional[MapperConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.entity = entity
        self.config = config or DEFAULT_CONFIG
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "entity_mapper")

        self._lock = threading.Lock()
        self._parse_count = 0
        self._successful_parses = 0
        self._dump_count = 0
        self._successful_dumps = 0
        self._total_processing_time = 0.0

        self.logger.info("EntityMapper initialized", extra={"entity": entity.tag})

    def parse(self, source: SourceType) -> T:
        """Parse a value of the bound entity from any supported source."""
        start_time = time.time()
        success = False
        try:
            value = parse(self.entity, source, self.config, self.correlation_id)
            success = True
            return value
        finally:
            self._record("parse", success, start_time)

    def dump(self, value: T, sink: Optional[SinkType] = None) -> Optional[str]:
        """Dump a value of the bound entity.

        Returns:
            The XML text when no sink is given, otherwise None
        """
        start_time = time.time()
        success = False
        try:
            if sink is None:
                result: Optional[str] = dump_string(
                    self.entity, value, self.config, self.correlation_id
                )
            else:
                dump(self.entity, value, sink, self.config, self.correlation_id)
                result = None
            success = True
            return result
        finally:
            self._record("dump", success, start_time)

    def reconfigure(self, **overrides: Any) -> None:
        """Replace selected configuration settings (see MapperConfig.override)."""
        self.config = self.config.override(**overrides)
        self.logger.info("EntityMapper reconfigured", extra={"overrides": sorted(overrides)})

    @property
    def statistics(self) -> Dict[str, Any]:
        with self._lock:
            calls = self._parse_count + self._dump_count
            return {
                "parse_count": self._parse_count,
                "successful_parses": self._successful_parses,
                "dump_count": self._dump_count,
                "successful_dumps": self._successful_dumps,
                "total_processing_time_ms": self._total_processing_time,
                "average_processing_time_ms": (
                    self._total_processing_time / calls if calls else 0.0
                ),
            }

    def reset_statistics(self) -> None:
        with self._lock:
            self._parse_count = 0
            self._successful_parses = 0
            self._dump_count = 0
            self._successful_dumps = 0
            self._total_processing_time = 0.0

    def _record(self, operation: str, success: bool, start_time: float) -> None:
        elapsed = (time.time() - start_time) * MS_PER_SECOND
        with self._lock:
            self._total_processing_time += elapsed
            if operation == "parse":
                self._parse_count += 1
                self._successful_parses += int(success)
            else:
                self._dump_count += 1
                self._successful_dumps += int(success)
