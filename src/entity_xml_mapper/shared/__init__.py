"""Shared utilities for entity XML mapping.

This module provides the exception hierarchy, configuration objects and
logging helpers used across all layers.
"""

from .config import (
    DEFAULT_CONFIG,
    DumpConfig,
    MapperConfig,
    ParseConfig,
)
from .errors import (
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
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DumpConfig",
    "MapperConfig",
    "ParseConfig",
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
    "CorrelationLogger",
    "get_logger",
]
