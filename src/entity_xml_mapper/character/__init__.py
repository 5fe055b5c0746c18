"""Character layer for entity XML mapping.

This module provides encoding detection and the source/sink normalization
used before the cursor reads a document and after the writer produces one.
"""

from .encoding import (
    BOMDetector,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    XMLDeclarationParser,
)
from .source import (
    SinkType,
    SourceType,
    decode_bytes,
    read_source,
    write_sink,
)

__all__ = [
    "BOMDetector",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "XMLDeclarationParser",
    "SinkType",
    "SourceType",
    "decode_bytes",
    "read_source",
    "write_sink",
]
