"""Encoding detection for XML byte input.

Byte sources are decoded before the cursor sees them. Detection runs in
stages: byte order mark, XML declaration, and finally a UTF-8 fallback. Unlike text sniffers this never guesses from statistics; an
XML document either declares its encoding or is UTF-8.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional

# Bytes inspected when looking for an XML declaration
DECLARATION_SAMPLE_SIZE = 1024


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    OVERRIDE = "override"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Detected encoding name, as declared for XML_DECLARATION
        method: Detection method used
        bom_length: Number of leading BOM bytes to skip before decoding
    """
    encoding: str
    method: DetectionMethod
    bom_length: int = 0


class BOMDetector:
    """Byte Order Mark (BOM) detection for the encodings XML allows."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        # UTF-32 BOMs first, the UTF-16 LE mark is a prefix of the UTF-32 LE one
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )
        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^\s*<\?xml\s[^>]*?encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\']'
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult with the declared name if the data starts with a
            declaration naming an encoding, None otherwise
        """
        match = self.XML_DECLARATION_PATTERN.search(data[:DECLARATION_SAMPLE_SIZE])
        if not match:
            return None

        return EncodingResult(
            encoding=match.group(1).decode("ascii").lower(),
            method=DetectionMethod.XML_DECLARATION,
        )


class EncodingDetector:
    """Main encoding detection class.

    Implements a cascading detection strategy:
    1. BOM detection
    2. XML declaration parsing
    3. Fallback to UTF-8
    """

    def __init__(self) -> None:
        """Initialize detection components."""
        self.bom_detector = BOMDetector()
        self.xml_parser = XMLDeclarationParser()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect encoding using multi-stage detection system.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult with detected encoding and metadata
        """
        bom_result = self.bom_detector.detect(data)
        if bom_result:
            return bom_result

        xml_result = self.xml_parser.parse_declaration(data)
        if xml_result:
            return xml_result

        return EncodingResult(encoding="utf-8", method=DetectionMethod.FALLBACK)
