"""Character sources and sinks for XML documents.

Normalizes the inputs accepted by the public API (text, bytes, paths and
file-like objects) into a single string for the cursor, and writes finished
documents back out to text or binary sinks. I/O and decoding failures are
reported as :class:`~entity_xml_mapper.shared.errors.XMLIOError`.
"""

import codecs
import io
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from entity_xml_mapper.shared import XMLIOError, get_logger

from .encoding import DetectionMethod, EncodingDetector, EncodingResult

SourceType = Union[str, bytes, bytearray, Path, BinaryIO, TextIO]
SinkType = Union[Path, BinaryIO, TextIO]

BOM_CHARACTER = "\ufeff"

_detector = EncodingDetector()


def decode_bytes(
    data: bytes,
    encoding: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Decode raw document bytes to text.

    Args:
        data: Raw document bytes
        encoding: Encoding override; detected when omitted
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Decoded document text without a leading byte order mark

    Raises:
        XMLIOError: If the encoding is unsupported or the bytes are not valid in it
    """
    logger = get_logger(__name__, correlation_id, "source")
    if encoding:
        result = EncodingResult(encoding=encoding, method=DetectionMethod.OVERRIDE)
    else:
        result = _detector.detect(bytes(data))
    logger.debug(
        "Decoding document bytes",
        extra={
            "encoding": result.encoding,
            "method": result.method.value,
            "byte_count": len(data),
        }
    )
    try:
        codec = codecs.lookup(result.encoding)
    except LookupError as e:
        logger.warning(
            "Unsupported document encoding",
            extra={"encoding": result.encoding, "method": result.method.value}
        )
        raise XMLIOError(f"Unsupported encoding: {result.encoding}") from e
    try:
        text = codec.decode(bytes(data[result.bom_length:]))[0]
    except UnicodeDecodeError as e:
        raise XMLIOError(f"Unable to decode document as {codec.name}: {e}") from e
    return _strip_bom(text)


def read_source(
    source: SourceType,
    encoding: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Read an XML document from any supported source.

    A ``str`` is taken to be the document itself; use a :class:`Path` to
    read from the file system.

    Raises:
        XMLIOError: If reading or decoding fails
        TypeError: If the source type is not supported
    """
    if isinstance(source, str):
        return _strip_bom(source)
    if isinstance(source, (bytes, bytearray)):
        return decode_bytes(source, encoding, correlation_id)
    if isinstance(source, Path):
        try:
            data = source.read_bytes()
        except OSError as e:
            raise XMLIOError(f"Unable to read {source}: {e}") from e
        return decode_bytes(data, encoding, correlation_id)
    if hasattr(source, "read"):
        try:
            content = source.read()
        except (OSError, UnicodeDecodeError) as e:
            raise XMLIOError(f"Unable to read from stream: {e}") from e
        if isinstance(content, (bytes, bytearray)):
            return decode_bytes(content, encoding, correlation_id)
        return _strip_bom(content)
    raise TypeError(f"Unsupported XML source type: {type(source).__name__}")


def write_sink(sink: SinkType, text: str, encoding: str = "utf-8") -> None:
    """Write a finished XML document to a path or stream.

    Text streams receive the document as-is; binary streams and paths receive
    it encoded with ``encoding``.

    Raises:
        XMLIOError: If writing fails
        TypeError: If the sink type is not supported
    """
    try:
        if isinstance(sink, Path):
            sink.write_bytes(text.encode(encoding))
        elif isinstance(sink, io.TextIOBase):
            sink.write(text)
        elif isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
            sink.write(text.encode(encoding))
        elif hasattr(sink, "write"):
            # duck-typed sinks receive text
            sink.write(text)
        else:
            raise TypeError(f"Unsupported XML sink type: {type(sink).__name__}")
    except (OSError, UnicodeEncodeError) as e:
        raise XMLIOError(f"Unable to write XML document: {e}") from e


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM_CHARACTER) else text
