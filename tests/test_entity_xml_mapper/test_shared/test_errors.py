"""Tests for the exception hierarchy."""

import pytest

from entity_xml_mapper.shared.errors import (
    DefinitionError,
    DuplicatePropertyError,
    Location,
    MalformedXMLError,
    MandatoryPropertyError,
    MissingEndElementError,
    MissingStartElementError,
    UnexpectedTextError,
    ValueDecodeError,
    XMLError,
    XMLIOError,
)


class TestLocation:
    """Test suite for Location."""

    def test_valid_location(self):
        """Test creation and formatting of a valid location."""
        location = Location(3, 7, 42)

        assert location.line == 3
        assert location.column == 7
        assert location.offset == 42
        assert str(location) == "line: 3, column: 7"

    def test_validation(self):
        """Test location validation."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            Location(0, 1)

        with pytest.raises(ValueError, match="Column number must be >= 1"):
            Location(1, 0)

        with pytest.raises(ValueError, match="Offset must be >= 0"):
            Location(1, 1, -1)


class TestXMLError:
    """Test suite for XMLError and its subclasses."""

    def test_message_with_location(self):
        """Test that the location is appended to the message."""
        error = XMLError("Expected white space", Location(2, 5))

        assert str(error) == "Expected white space, line: 2, column: 5"
        assert error.message == "Expected white space"
        assert error.line == 2
        assert error.column == 5

    def test_message_without_location(self):
        """Test errors with an unknown location."""
        error = XMLError("Unable to write")

        assert str(error) == "Unable to write"
        assert error.location is None
        assert error.line is None
        assert error.column is None

    @pytest.mark.parametrize("error_class", [
        MalformedXMLError,
        UnexpectedTextError,
        MissingStartElementError,
        MissingEndElementError,
        XMLIOError,
        DefinitionError,
    ])
    def test_subclasses(self, error_class):
        """Test that every failure is an XMLError."""
        assert issubclass(error_class, XMLError)

    def test_definition_error_is_value_error(self):
        """Test that invalid definitions are also ValueErrors."""
        assert issubclass(DefinitionError, ValueError)

    def test_mandatory_property_error(self):
        """Test mandatory property error message and fields."""
        error = MandatoryPropertyError("engine", "car", Location(1, 18))

        assert str(error) == (
            "Mandatory <engine> property of <car> has not been set, line: 1, column: 18"
        )
        assert error.property_tag == "engine"
        assert error.entity_tag == "car"

    def test_duplicate_property_error(self):
        """Test duplicate property error message and fields."""
        error = DuplicatePropertyError("vin", "car")

        assert str(error) == "Duplicate <vin> property of <car>"
        assert error.property_tag == "vin"

    def test_value_decode_error(self):
        """Test value decode error message and fields."""
        error = ValueDecodeError("year", "abc", "not a number")

        assert error.message == "Invalid value 'abc' of <year> attribute: not a number"
        assert error.text == "abc"
        assert error.property_tag == "year"
