"""Entity XML Mapper.

Declarative mapping between application values and XML documents. Entities
describe element tags and the attributes, relationships and custom
properties nested inside them; the same definition drives both parsing and
dumping.

Progressive API Disclosure:
- Level 1: Entity methods - from_xml(), to_xml(), read_from_xml(), write_to_xml()
- Level 2: Simple functions - parse(), parse_string(), parse_file(), dump(), dump_string(), dump_file()
- Level 3: Configured mapper - EntityMapper class with MapperConfig
- Level 4: Custom properties - Property subclasses using XMLParser and XMLDumper primitives
"""

__version__ = "0.1.0"
__author__ = "Entity XML Mapper Team"

# Progressive API disclosure - Level 2 and 3
from .api import (
    EntityMapper,
    LxmlAdapter,
    dump,
    dump_file,
    dump_string,
    parse,
    parse_file,
    parse_string,
)

# Level 1 and 4: Entity definitions and extension points
from .mapping import (
    Attribute,
    Builder,
    Entity,
    Property,
    PropertyKind,
    Relationship,
    XMLDumper,
    XMLParser,
)

# Configuration classes for advanced usage
from .shared.config import DumpConfig, MapperConfig, ParseConfig

# Exception hierarchy
from .shared.errors import (
    DefinitionError,
    DuplicatePropertyError,
    Location,
    MalformedXMLError,
    MandatoryPropertyError,
    MissingEndElementError,
    MissingStartElementError,
    UnbalancedElementError,
    UnexpectedTextError,
    ValueDecodeError,
    XMLError,
    XMLIOError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Entity definitions
    "Attribute",
    "Builder",
    "Entity",
    "Property",
    "PropertyKind",
    "Relationship",

    # Simple functions
    "parse",
    "parse_string",
    "parse_file",
    "dump",
    "dump_string",
    "dump_file",

    # Configured mapper and integrations
    "EntityMapper",
    "LxmlAdapter",

    # Primitives for custom properties
    "XMLDumper",
    "XMLParser",

    # Configuration classes
    "DumpConfig",
    "MapperConfig",
    "ParseConfig",

    # Errors
    "DefinitionError",
    "DuplicatePropertyError",
    "Location",
    "MalformedXMLError",
    "MandatoryPropertyError",
    "MissingEndElementError",
    "MissingStartElementError",
    "UnbalancedElementError",
    "UnexpectedTextError",
    "ValueDecodeError",
    "XMLError",
    "XMLIOError",
]
