"""Declarative mapping between entity values and XML elements.

This module provides entities, their properties and the parser and dumper
that walk them.
"""

from .dumper import XMLDumper
from .entity import Entity
from .parser import XMLParser
from .property import (
    Attribute,
    Builder,
    Factory,
    Getter,
    Property,
    PropertyKind,
    Relationship,
    Setter,
    identity,
    singleton,
)

__all__ = [
    "Attribute",
    "Builder",
    "Entity",
    "Factory",
    "Getter",
    "Property",
    "PropertyKind",
    "Relationship",
    "Setter",
    "XMLDumper",
    "XMLParser",
    "identity",
    "singleton",
]
