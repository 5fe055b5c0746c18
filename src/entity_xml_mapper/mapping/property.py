"""Entity properties: attributes, relationships and custom constituents.

A property is a named mapping rule between a finished entity value and the
builder that produces it. It knows how to read its values out of a finished
value (``get_values``), how to hand a parsed value to a builder (``apply``),
and how to write and read one occurrence as XML (``dump`` and ``parse``).

Every property carries two cardinality flags. A *unique* property occurs at
most once per entity element; a non-unique one may repeat. An *optional*
property may be absent; a mandatory one must occur at least once.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    List,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from entity_xml_mapper.shared import DefinitionError, ValueDecodeError, XMLError
from entity_xml_mapper.streaming import is_valid_name

if TYPE_CHECKING:
    from .dumper import XMLDumper
    from .entity import Entity
    from .parser import XMLParser

T = TypeVar("T")
B = TypeVar("B")
V = TypeVar("V")
RT = TypeVar("RT")
RB = TypeVar("RB")
T_co = TypeVar("T_co", covariant=True)

Getter = Callable[[T], V]
Setter = Callable[[B, V], Any]
Factory = Callable[[], B]


@runtime_checkable
class Builder(Protocol[T_co]):
    """Mutable accumulator that produces a finished value."""

    def build(self) -> T_co:
        ...


class PropertyKind(Enum):
    """Closed set of property kinds."""

    ATTRIBUTE = auto()     # Leaf with a text representation
    RELATIONSHIP = auto()  # Nested entity, parsed and dumped recursively
    CUSTOM = auto()        # User-defined constituent


def identity(value: Any) -> Any:
    return value


def singleton(getter: Callable[[T], Optional[V]]) -> Callable[[T], List[V]]:
    """Adapt a single-value getter to the multi-value getter contract.

    A ``None`` result means the value is absent and yields no values.
    """
    def get_values(value: T) -> List[V]:
        result = getter(value)
        return [] if result is None else [result]

    get_values.__name__ = getattr(getter, "__name__", "get_values")
    return get_values


class Property(ABC, Generic[T, B, V]):
    """Base class of all entity properties.

    Subclass this directly to define a custom constituent: implement
    :meth:`dump` and :meth:`parse` using the element-level primitives of
    :class:`~entity_xml_mapper.mapping.dumper.XMLDumper` and
    :class:`~entity_xml_mapper.mapping.parser.XMLParser`.
    """

    kind: ClassVar[PropertyKind] = PropertyKind.CUSTOM

    def __init__(
        self,
        tag: str,
        getter: Callable[[T], Optional[Iterable[V]]],
        setter: Setter[B, V],
        optional: bool,
        unique: bool
    ) -> None:
        """Create a property.

        Args:
            tag: XML element tag name of one occurrence
            getter: Returns all values of the property from a finished value
            setter: Applies one parsed value to a builder
            optional: Whether the property may be absent
            unique: Whether the property occurs at most once

        Raises:
            DefinitionError: If the tag is not a valid XML name
        """
        if not isinstance(tag, str) or not is_valid_name(tag):
            raise DefinitionError(f"Invalid property tag: {tag!r}")
        self._tag = tag
        self._getter = getter
        self._setter = setter
        self._optional = optional
        self._unique = unique

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def optional(self) -> bool:
        return self._optional

    @property
    def unique(self) -> bool:
        return self._unique

    def get_values(self, value: T) -> List[V]:
        """All values of this property in a finished value, in dump order."""
        values = self._getter(value)
        if values is None:
            return []
        return list(values)

    def apply(self, builder: B, value: V) -> None:
        """Hand one parsed value to the builder."""
        self._setter(builder, value)

    @abstractmethod
    def dump(self, dumper: "XMLDumper", value: V) -> None:
        """Write one occurrence of the property."""

    @abstractmethod
    def parse(self, parser: "XMLParser") -> V:
        """Read one occurrence of the property at the cursor position."""

    def try_parse(self, parser: "XMLParser", builder: B) -> bool:
        """Parse one occurrence if the next element belongs to this property.

        Returns:
            False, without consuming input, when the next element does not
            carry this property's tag; True after parsing and applying it
        """
        if not parser.has_start_element(self._tag):
            return False
        self.apply(builder, self.parse(parser))
        return True

    def __repr__(self) -> str:
        cardinality = "unique" if self._unique else "multi"
        presence = "optional" if self._optional else "mandatory"
        return f"<{type(self).__name__} {self._tag!r} {cardinality} {presence}>"


class Attribute(Property[T, B, V]):
    """Leaf property with a text representation.

    Stored as ``<tag>text</tag>``. Converters turn values into text and back;
    both default to the identity for plain string attributes.
    """

    kind: ClassVar[PropertyKind] = PropertyKind.ATTRIBUTE

    def __init__(
        self,
        tag: str,
        getter: Callable[[T], Optional[Iterable[V]]],
        setter: Setter[B, V],
        to_text: Callable[[V], str] = identity,
        from_text: Callable[[str], V] = identity,
        optional: bool = False,
        unique: bool = True
    ) -> None:
        super().__init__(tag, getter, setter, optional, unique)
        self.to_text = to_text
        self.from_text = from_text

    @classmethod
    def of(
        cls,
        tag: str,
        getter: Getter[T, V],
        setter: Setter[B, V],
        to_text: Callable[[V], str] = identity,
        from_text: Callable[[str], V] = identity
    ) -> "Attribute[T, B, V]":
        """Create a unique, mandatory attribute."""
        return cls(tag, singleton(getter), setter, to_text, from_text, optional=False, unique=True)

    @classmethod
    def of_optional(
        cls,
        tag: str,
        getter: Getter[T, Optional[V]],
        setter: Setter[B, V],
        to_text: Callable[[V], str] = identity,
        from_text: Callable[[str], V] = identity
    ) -> "Attribute[T, B, V]":
        """Create a unique, optional attribute. A ``None`` value is not written."""
        return cls(tag, singleton(getter), setter, to_text, from_text, optional=True, unique=True)

    @classmethod
    def of_multi(
        cls,
        tag: str,
        getter: Getter[T, Iterable[V]],
        setter: Setter[B, V],
        to_text: Callable[[V], str] = identity,
        from_text: Callable[[str], V] = identity
    ) -> "Attribute[T, B, V]":
        """Create a repeatable, optional attribute. The setter appends."""
        return cls(tag, getter, setter, to_text, from_text, optional=True, unique=False)

    def dump(self, dumper: "XMLDumper", value: V) -> None:
        try:
            text = self.to_text(value)
        except XMLError:
            raise
        except Exception as e:
            raise XMLError(f"Unable to convert value of <{self.tag}> attribute to text: {e}") from e
        if not isinstance(text, str):
            raise XMLError(
                f"Value of <{self.tag}> attribute converted to "
                f"{type(text).__name__}, expected str"
            )
        dumper.dump_start_element(self.tag)
        dumper.dump_text(text)
        dumper.dump_end_element()

    def parse(self, parser: "XMLParser") -> V:
        parser.parse_start_element(self.tag)
        location = parser.location
        text = parser.parse_text()
        parser.parse_end_element(self.tag)
        try:
            return self.from_text(text)
        except XMLError:
            raise
        except Exception as e:
            raise ValueDecodeError(self.tag, text, str(e) or type(e).__name__, location) from e


class Relationship(Property[T, B, RT], Generic[T, B, RT, RB]):
    """Property whose values are instances of another entity.

    Each value is stored as a nested element named after the related
    entity's tag and is dumped and parsed recursively.
    """

    kind: ClassVar[PropertyKind] = PropertyKind.RELATIONSHIP

    def __init__(
        self,
        related_entity: "Entity[RT, RB]",
        getter: Callable[[T], Optional[Iterable[RT]]],
        setter: Setter[B, RT],
        optional: bool = True,
        unique: bool = False
    ) -> None:
        super().__init__(related_entity.tag, getter, setter, optional, unique)
        self.related_entity = related_entity

    @classmethod
    def of(
        cls,
        related_entity: "Entity[RT, RB]",
        getter: Getter[T, Iterable[RT]],
        setter: Setter[B, RT]
    ) -> "Relationship[T, B, RT, RB]":
        """Create a repeatable, optional relationship. The setter appends."""
        return cls(related_entity, getter, setter, optional=True, unique=False)

    @classmethod
    def of_singular(
        cls,
        related_entity: "Entity[RT, RB]",
        getter: Getter[T, Optional[RT]],
        setter: Setter[B, RT]
    ) -> "Relationship[T, B, RT, RB]":
        """Create a unique, optional relationship."""
        return cls(related_entity, singleton(getter), setter, optional=True, unique=True)

    @classmethod
    def of_mandatory(
        cls,
        related_entity: "Entity[RT, RB]",
        getter: Getter[T, RT],
        setter: Setter[B, RT]
    ) -> "Relationship[T, B, RT, RB]":
        """Create a unique, mandatory relationship."""
        return cls(related_entity, singleton(getter), setter, optional=False, unique=True)

    def dump(self, dumper: "XMLDumper", value: RT) -> None:
        dumper.dump_entity(self.related_entity, value)

    def parse(self, parser: "XMLParser") -> RT:
        builder = self.related_entity.new_builder()
        parser.parse_entity(self.related_entity, builder)
        return self.related_entity.build(builder)
