"""Public parse and dump API.

Module-level functions for one-off calls, :class:`EntityMapper` for
repeated calls with a fixed configuration, and the lxml adapter.
"""

from .adapters import LxmlAdapter
from .mapper import (
    EntityMapper,
    dump,
    dump_file,
    dump_string,
    parse,
    parse_file,
    parse_string,
)

__all__ = [
    "EntityMapper",
    "LxmlAdapter",
    "dump",
    "dump_file",
    "dump_string",
    "parse",
    "parse_file",
    "parse_string",
]
