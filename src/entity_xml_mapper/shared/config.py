"""Configuration classes for entity XML mapping.

This module provides configuration objects for parsing and dumping, enabling
control over output formatting, input decoding and structural limits.
"""

import codecs
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Optional


@dataclass
class ParseConfig:
    """Configuration for reading XML documents into entity values."""

    max_depth: int = 1000
    encoding: Optional[str] = None
    allow_doctype: bool = True

    def __post_init__(self) -> None:
        """Validate parse configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")
        if self.encoding is not None:
            _check_encoding(self.encoding)


@dataclass
class DumpConfig:
    """Configuration for writing entity values as XML documents."""

    indent: Optional[str] = "  "
    xml_declaration: bool = False
    encoding: str = "utf-8"
    newline: str = "\n"

    def __post_init__(self) -> None:
        """Validate dump configuration."""
        if self.indent is not None and self.indent.strip():
            raise ValueError("indent must contain only whitespace or be None")
        if self.newline not in ("\n", "\r\n"):
            raise ValueError("newline must be '\\n' or '\\r\\n'")
        _check_encoding(self.encoding)

    @property
    def pretty(self) -> bool:
        """Whether child elements are placed on their own lines."""
        return self.indent is not None


def _check_encoding(encoding: str) -> None:
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValueError(f"Unknown encoding: {encoding}") from e


@dataclass(frozen=True)
class MapperConfig:
    """Complete configuration for parse and dump operations.

    Immutable, so a single instance can be shared by concurrent calls.
    """

    parse: ParseConfig = field(default_factory=ParseConfig)
    dump: DumpConfig = field(default_factory=DumpConfig)
    correlation_id: Optional[str] = None

    def override(self, **kwargs: Any) -> "MapperConfig":
        """Create a copy with selected settings replaced.

        Keys are either top-level field names or ``<section>__<field>`` for
        nested settings, e.g. ``dump__indent=None``.

        Raises:
            ValueError: If a key does not name a known setting
        """
        sections: Dict[str, Dict[str, Any]] = {"parse": {}, "dump": {}}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            section, sep, name = key.partition("__")
            if sep:
                if section not in sections:
                    raise ValueError(f"Unknown configuration section: {section}")
                known = {f.name for f in fields(getattr(self, section))}
                if name not in known:
                    raise ValueError(f"Unknown {section} setting: {name}")
                sections[section][name] = value
            elif key in {f.name for f in fields(self)}:
                top_level[key] = value
            else:
                raise ValueError(f"Unknown configuration setting: {key}")

        for section, changes in sections.items():
            if changes:
                base = top_level.get(section, getattr(self, section))
                top_level[section] = replace(base, **changes)
        return replace(self, **top_level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapperConfig":
        """Create configuration from a dictionary produced by :meth:`to_dict`."""
        return cls(
            parse=ParseConfig(**data.get("parse", {})),
            dump=DumpConfig(**data.get("dump", {})),
            correlation_id=data.get("correlation_id"),
        )

    @classmethod
    def compact(cls) -> "MapperConfig":
        """Configuration producing single-line output."""
        return cls(dump=DumpConfig(indent=None))

    @classmethod
    def pretty(cls) -> "MapperConfig":
        """Configuration producing indented output with an XML declaration."""
        return cls(dump=DumpConfig(indent="  ", xml_declaration=True))


DEFAULT_CONFIG = MapperConfig()
