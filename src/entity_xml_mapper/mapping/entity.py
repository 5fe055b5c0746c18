"""Entity definitions.

An entity is a type of thing about which data is stored. In XML form it is
an element with a fixed tag whose child elements hold the entity's
attributes, relationships and custom properties.

Besides its value type, every entity has a builder type: a mutable object
the parser fills in before asking it for the finished value. Mutable value
types may act as their own builder (see :meth:`Entity.of_mutable`).
"""

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from entity_xml_mapper.shared import DefinitionError
from entity_xml_mapper.streaming import is_valid_name

from .property import (
    Attribute,
    Factory,
    Getter,
    Property,
    Relationship,
    Setter,
    identity,
)

if TYPE_CHECKING:
    from entity_xml_mapper.character import SinkType, SourceType
    from entity_xml_mapper.shared import MapperConfig

T = TypeVar("T")
B = TypeVar("B")


class Entity(Generic[T, B]):
    """Tag name, builder factory and ordered properties of an entity type.

    An entity is configured either through its constructor or, for entities
    that relate to themselves, with the ``add_*`` methods right after
    creation. Once configured it must not change; it may then be shared
    freely between threads and across any number of parse and dump calls.

    Examples:
        >>> engine = Entity.of_mutable(
        ...     "engine", Engine,
        ...     Attribute.of_optional("fuel", attrgetter("fuel"), Engine.set_fuel))
        >>> engine.to_xml(Engine(fuel="diesel"), MapperConfig.compact())
        '<engine><fuel>diesel</fuel></engine>'
    """

    __slots__ = ("_tag", "_builder_factory", "_build", "_properties")

    def __init__(
        self,
        tag: str,
        builder_factory: Factory[B],
        *properties: Property[T, B, Any],
        build: Optional[Callable[[B], T]] = None
    ) -> None:
        """Create an entity.

        Args:
            tag: XML element tag name of the entity
            builder_factory: Zero-argument callable returning a fresh builder
            *properties: Properties in dump order
            build: Turns a filled builder into the finished value; defaults
                to calling the builder's ``build()`` method

        Raises:
            DefinitionError: If a tag is invalid or two properties share a tag
        """
        if not isinstance(tag, str) or not is_valid_name(tag):
            raise DefinitionError(f"Invalid entity tag: {tag!r}")
        if not callable(builder_factory):
            raise DefinitionError(f"Builder factory of <{tag}> is not callable")

        self._tag = tag
        self._builder_factory = builder_factory
        self._build = build
        self._properties: List[Property[T, B, Any]] = []
        for prop in properties:
            self.add_property(prop)

    @classmethod
    def of(
        cls,
        tag: str,
        builder_factory: Factory[B],
        *properties: Property[T, B, Any],
        build: Optional[Callable[[B], T]] = None
    ) -> "Entity[T, B]":
        """Create an entity whose builder type differs from its value type."""
        return cls(tag, builder_factory, *properties, build=build)

    @classmethod
    def of_mutable(
        cls,
        tag: str,
        factory: Factory[T],
        *properties: Property[T, T, Any]
    ) -> "Entity[T, T]":
        """Create an entity of a mutable type that acts as its own builder."""
        return cls(tag, factory, *properties, build=identity)

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def properties(self) -> Tuple[Property[T, B, Any], ...]:
        return tuple(self._properties)

    def add_property(self, prop: Property[T, B, Any]) -> None:
        """Append a property after the properties already defined.

        Examples:
            >>> node = Entity.of_mutable(
            ...     "node", Node, Attribute.of("name", attrgetter("name"), Node.set_name))
            >>> node.add_relationship(node, attrgetter("children"), Node.add_child)

        Raises:
            DefinitionError: If ``prop`` is not a property or its tag is
                already used by another property of this entity
        """
        if not isinstance(prop, Property):
            raise DefinitionError(f"Not a property of <{self._tag}>: {prop!r}")
        if any(existing.tag == prop.tag for existing in self._properties):
            raise DefinitionError(f"Duplicate property tag <{prop.tag}> in <{self._tag}>")
        self._properties.append(prop)

    def add_attribute(
        self,
        tag: str,
        getter: Getter[T, Any],
        setter: Setter[B, Any],
        to_text: Callable[[Any], str] = identity,
        from_text: Callable[[str], Any] = identity
    ) -> None:
        """Add a unique, mandatory attribute (see :meth:`Attribute.of`)."""
        self.add_property(Attribute.of(tag, getter, setter, to_text, from_text))

    def add_optional_attribute(
        self,
        tag: str,
        getter: Getter[T, Any],
        setter: Setter[B, Any],
        to_text: Callable[[Any], str] = identity,
        from_text: Callable[[str], Any] = identity
    ) -> None:
        """Add a unique, optional attribute."""
        self.add_property(Attribute.of_optional(tag, getter, setter, to_text, from_text))

    def add_multi_attribute(
        self,
        tag: str,
        getter: Getter[T, Iterable[Any]],
        setter: Setter[B, Any],
        to_text: Callable[[Any], str] = identity,
        from_text: Callable[[str], Any] = identity
    ) -> None:
        """Add a repeatable, optional attribute."""
        self.add_property(Attribute.of_multi(tag, getter, setter, to_text, from_text))

    def add_relationship(
        self,
        related_entity: "Entity[Any, Any]",
        getter: Getter[T, Iterable[Any]],
        setter: Setter[B, Any]
    ) -> None:
        """Add a repeatable, optional relationship, possibly to this entity."""
        self.add_property(Relationship.of(related_entity, getter, setter))

    def add_singular_relationship(
        self,
        related_entity: "Entity[Any, Any]",
        getter: Getter[T, Any],
        setter: Setter[B, Any]
    ) -> None:
        """Add a unique, optional relationship, possibly to this entity."""
        self.add_property(Relationship.of_singular(related_entity, getter, setter))

    def new_builder(self) -> B:
        """Create a fresh, empty builder."""
        return self._builder_factory()

    def build(self, builder: B) -> T:
        """Produce the finished value from a filled builder."""
        if self._build is not None:
            return self._build(builder)
        build = getattr(builder, "build", None)
        if build is None:
            raise DefinitionError(
                f"Builder {type(builder).__name__} of <{self._tag}> has no build() "
                "method and the entity defines no build function"
            )
        return build()

    def from_xml(self, xml: str, config: Optional["MapperConfig"] = None) -> T:
        """Deserialize a value from XML text."""
        from entity_xml_mapper.api import parse_string
        return parse_string(self, xml, config)

    def to_xml(self, value: T, config: Optional["MapperConfig"] = None) -> str:
        """Serialize a value to XML text."""
        from entity_xml_mapper.api import dump_string
        return dump_string(self, value, config)

    def read_from_xml(
        self,
        source: Union["SourceType", str],
        config: Optional["MapperConfig"] = None
    ) -> T:
        """Deserialize a value from a path or readable stream.

        Unlike :meth:`from_xml`, a ``str`` argument is a file path here.
        """
        from entity_xml_mapper.api import parse, parse_file
        if isinstance(source, str):
            return parse_file(self, source, config)
        return parse(self, source, config)

    def write_to_xml(
        self,
        sink: Union["SinkType", str],
        value: T,
        config: Optional["MapperConfig"] = None
    ) -> None:
        """Serialize a value to a path or writable stream.

        A ``str`` argument is a file path.
        """
        from entity_xml_mapper.api import dump, dump_file
        if isinstance(sink, str):
            dump_file(self, value, sink, config)
        else:
            dump(self, value, sink, config)

    def __repr__(self) -> str:
        tags = ", ".join(prop.tag for prop in self._properties)
        return f"<Entity {self._tag!r} [{tags}]>"
