"""Tests for the configuration system."""

from dataclasses import FrozenInstanceError

import pytest

from entity_xml_mapper.shared.config import (
    DEFAULT_CONFIG,
    DumpConfig,
    MapperConfig,
    ParseConfig,
)


class TestParseConfig:
    """Test suite for ParseConfig."""

    def test_default_configuration(self):
        """Test default parse configuration values."""
        config = ParseConfig()

        assert config.max_depth == 1000
        assert config.encoding is None
        assert config.allow_doctype is True

    def test_validation_failures(self):
        """Test parse configuration validation failures."""
        with pytest.raises(ValueError, match="max_depth must be > 0"):
            ParseConfig(max_depth=0)

        with pytest.raises(ValueError, match="Unknown encoding: bogus"):
            ParseConfig(encoding="bogus")

    def test_known_encoding_accepted(self):
        """Test that any codec known to Python is accepted."""
        assert ParseConfig(encoding="latin-1").encoding == "latin-1"


class TestDumpConfig:
    """Test suite for DumpConfig."""

    def test_default_configuration(self):
        """Test default dump configuration values."""
        config = DumpConfig()

        assert config.indent == "  "
        assert config.xml_declaration is False
        assert config.encoding == "utf-8"
        assert config.newline == "\n"
        assert config.pretty is True

    def test_compact_output(self):
        """Test that a missing indent selects single-line output."""
        assert DumpConfig(indent=None).pretty is False

    def test_validation_failures(self):
        """Test dump configuration validation failures."""
        with pytest.raises(ValueError, match="indent must contain only whitespace"):
            DumpConfig(indent="--")

        with pytest.raises(ValueError, match="newline must be"):
            DumpConfig(newline="\r")

        with pytest.raises(ValueError, match="Unknown encoding"):
            DumpConfig(encoding="no-such-codec")


class TestMapperConfig:
    """Test suite for MapperConfig."""

    def test_defaults(self):
        """Test default mapper configuration."""
        config = MapperConfig()

        assert config.parse == ParseConfig()
        assert config.dump == DumpConfig()
        assert config.correlation_id is None
        assert DEFAULT_CONFIG == config

    def test_immutable(self):
        """Test that mapper configuration cannot be modified in place."""
        config = MapperConfig()

        with pytest.raises(FrozenInstanceError):
            config.correlation_id = "abc"

    def test_override_nested_settings(self):
        """Test overriding settings of a configuration section."""
        config = MapperConfig().override(dump__indent=None, parse__max_depth=5)

        assert config.dump.indent is None
        assert config.parse.max_depth == 5
        assert config.dump.encoding == "utf-8"

    def test_override_top_level_settings(self):
        """Test overriding top-level settings."""
        config = MapperConfig().override(correlation_id="req-1")

        assert config.correlation_id == "req-1"

    def test_override_section_and_nested_setting(self):
        """Test that nested changes apply on top of a replaced section."""
        config = MapperConfig().override(
            dump=DumpConfig(encoding="latin-1"), dump__indent="\t"
        )

        assert config.dump.encoding == "latin-1"
        assert config.dump.indent == "\t"

    def test_override_leaves_original_untouched(self):
        """Test that override returns a new instance."""
        original = MapperConfig()
        original.override(dump__xml_declaration=True)

        assert original.dump.xml_declaration is False

    def test_override_unknown_keys(self):
        """Test that unknown settings are rejected."""
        with pytest.raises(ValueError, match="Unknown configuration setting: verbose"):
            MapperConfig().override(verbose=True)

        with pytest.raises(ValueError, match="Unknown configuration section: tree"):
            MapperConfig().override(tree__depth=1)

        with pytest.raises(ValueError, match="Unknown dump setting: width"):
            MapperConfig().override(dump__width=80)

    def test_override_validates_values(self):
        """Test that overridden values pass section validation."""
        with pytest.raises(ValueError, match="max_depth must be > 0"):
            MapperConfig().override(parse__max_depth=-1)

    def test_dict_round_trip(self):
        """Test conversion to and from plain dictionaries."""
        config = MapperConfig(
            parse=ParseConfig(max_depth=10, allow_doctype=False),
            dump=DumpConfig(indent=None, xml_declaration=True),
            correlation_id="cid",
        )

        data = config.to_dict()

        assert data["parse"]["max_depth"] == 10
        assert data["dump"]["indent"] is None
        assert MapperConfig.from_dict(data) == config

    def test_from_partial_dict(self):
        """Test that missing sections fall back to defaults."""
        config = MapperConfig.from_dict({"dump": {"indent": "    "}})

        assert config.dump.indent == "    "
        assert config.parse == ParseConfig()

    def test_presets(self):
        """Test compact and pretty presets."""
        assert MapperConfig.compact().dump.indent is None
        assert MapperConfig.compact().dump.xml_declaration is False
        assert MapperConfig.pretty().dump.indent == "  "
        assert MapperConfig.pretty().dump.xml_declaration is True
