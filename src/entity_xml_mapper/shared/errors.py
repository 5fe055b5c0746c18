"""Exception hierarchy for entity XML mapping.

Every failure raised by parsing or dumping is an :class:`XMLError`. Subclasses
identify the kind of failure; all of them carry the source location reported
by the cursor when one is known.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Position of an event in the XML source."""

    line: int
    column: int
    offset: int = 0

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def __str__(self) -> str:
        return f"line: {self.line}, column: {self.column}"


class XMLError(Exception):
    """Base exception for all parse and dump failures.

    Attributes:
        message: Human readable description without location suffix
        location: Source location of the failure, if known
    """

    def __init__(self, message: str, location: Optional[Location] = None) -> None:
        self.message = message
        self.location = location
        if location is not None:
            super().__init__(f"{message}, {location}")
        else:
            super().__init__(message)

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    @property
    def column(self) -> Optional[int]:
        return self.location.column if self.location else None


class MalformedXMLError(XMLError):
    """The character stream is not well-formed XML."""


class UnexpectedTextError(XMLError):
    """Non-whitespace character data where only elements are allowed."""


class MissingStartElementError(XMLError):
    """A start element (or start of document) was expected but not found."""


class MissingEndElementError(XMLError):
    """An end element (or end of document) was expected but not found."""


class UnbalancedElementError(MalformedXMLError, MissingEndElementError):
    """End tags do not balance start tags.

    Raised for an end tag that does not close the open element, an end tag
    with no open element, and an element still open at the end of input.
    """


class MandatoryPropertyError(XMLError):
    """A mandatory property was absent from a complete entity element."""

    def __init__(
        self,
        property_tag: str,
        entity_tag: str,
        location: Optional[Location] = None
    ) -> None:
        self.property_tag = property_tag
        self.entity_tag = entity_tag
        super().__init__(
            f"Mandatory <{property_tag}> property of <{entity_tag}> has not been set",
            location
        )


class DuplicatePropertyError(XMLError):
    """A unique property occurred more than once within one entity element."""

    def __init__(
        self,
        property_tag: str,
        entity_tag: str,
        location: Optional[Location] = None
    ) -> None:
        self.property_tag = property_tag
        self.entity_tag = entity_tag
        super().__init__(
            f"Duplicate <{property_tag}> property of <{entity_tag}>", location
        )


class ValueDecodeError(XMLError):
    """Attribute text could not be converted to its target type."""

    def __init__(
        self,
        property_tag: str,
        text: str,
        reason: str,
        location: Optional[Location] = None
    ) -> None:
        self.property_tag = property_tag
        self.text = text
        super().__init__(
            f"Invalid value {text!r} of <{property_tag}> attribute: {reason}",
            location
        )


class XMLIOError(XMLError):
    """Reading the source or writing the sink failed."""


class DefinitionError(XMLError, ValueError):
    """An entity or property definition is invalid."""
