"""Tests for the strict pull cursor."""

import pytest

from entity_xml_mapper.shared import (
    Location,
    MalformedXMLError,
    MissingEndElementError,
    ParseConfig,
    UnbalancedElementError,
    XMLError,
)
from entity_xml_mapper.streaming.cursor import (
    DEFAULT_CURSOR_FACTORY,
    CursorFactory,
    EventType,
    XMLCursor,
    is_valid_name,
)


def event_types(text, config=None):
    return [event.type for event in XMLCursor(text, config)]


class TestEvents:
    """Test suite for event production."""

    def test_initial_event(self):
        """Test that the cursor starts on the start of the document."""
        cursor = XMLCursor("<a/>")

        assert cursor.event_type == EventType.START_DOCUMENT
        assert cursor.location == Location(1, 1, 0)
        assert cursor.depth == 0

    def test_event_sequence(self):
        """Test the events of a document with mixed content."""
        cursor = XMLCursor("<a>x<!--c--><?pi data?><b/></a>")
        events = list(cursor)

        assert [e.type for e in events] == [
            EventType.START_ELEMENT,
            EventType.CHARACTERS,
            EventType.COMMENT,
            EventType.PROCESSING_INSTRUCTION,
            EventType.START_ELEMENT,
            EventType.END_ELEMENT,
            EventType.END_ELEMENT,
            EventType.END_DOCUMENT,
        ]
        assert events[1].text == "x"
        assert events[2].text == "c"
        assert (events[3].name, events[3].text) == ("pi", "data")
        assert events[4].name == events[5].name == "b"

    def test_self_closing_element(self):
        """Test that self-closing elements produce start and end events."""
        cursor = XMLCursor("<a/>")

        assert cursor.next().type == EventType.START_ELEMENT
        assert cursor.depth == 1
        assert cursor.next().type == EventType.END_ELEMENT
        assert cursor.depth == 0

    def test_no_events_after_end(self):
        """Test that pulling past the end of the document fails."""
        cursor = XMLCursor("<a/>")
        list(cursor)

        assert cursor.has_next() is False
        with pytest.raises(XMLError, match="No events after end of document"):
            cursor.next()

    def test_locations(self):
        """Test line and column tracking."""
        events = list(XMLCursor("<a>\n  <b>t</b>\n</a>"))

        assert events[0].location == Location(1, 1, 0)
        assert events[1].location == Location(1, 4, 3)
        assert events[2].name == "b"
        assert events[2].location == Location(2, 3, 6)
        assert events[3].location == Location(2, 6, 9)
        assert events[6].type == EventType.END_ELEMENT
        assert events[6].location.line == 3

    def test_line_ends_normalized(self):
        """Test that CR LF and CR become LF."""
        events = list(XMLCursor("<a>\r\nx\ry</a>"))

        assert events[1].text == "\nx\ny"

    def test_references(self):
        """Test predefined entity and character references."""
        events = list(XMLCursor("<a>&lt;&#65;&#x42;&amp;&quot;&apos;&gt;</a>"))

        assert events[1].text == "<AB&\"'>"

    def test_cdata(self):
        """Test that CDATA sections are reported as character data."""
        events = list(XMLCursor("<a><![CDATA[<b>&amp;]]></a>"))

        assert events[1].type == EventType.CHARACTERS
        assert events[1].text == "<b>&amp;"

    def test_attributes(self):
        """Test that attributes are read."""
        event = XMLCursor("<a x=\"1\" y='&lt;'/>").next()

        assert event.attributes == (("x", "1"), ("y", "<"))

    def test_xml_declaration(self):
        """Test that the XML declaration is skipped."""
        cursor = XMLCursor('<?xml version="1.1" encoding="UTF-8"?>\n<a/>')

        assert cursor.next().type == EventType.CHARACTERS
        assert cursor.next().name == "a"

    def test_doctype_skipped(self):
        """Test that a DOCTYPE without internal subset is skipped."""
        types = event_types('<!DOCTYPE car SYSTEM "car.dtd"><car/>')

        assert types[0] == EventType.START_ELEMENT

    def test_whitespace_event(self):
        """Test whitespace detection on character events."""
        events = list(XMLCursor(" <a> \t</a>"))

        assert events[0].is_whitespace
        assert events[2].is_whitespace
        assert not events[1].is_whitespace


class TestMalformedDocuments:
    """Test suite for well-formedness errors."""

    @pytest.mark.parametrize("text,message", [
        ("boom!", "Content is not allowed in prolog"),
        ("<a/>x", "Content is not allowed after the root element"),
        ("", "Document has no root element"),
        ("<!-- only -->", "Document has no root element"),
        ("<car><!--", "Unterminated comment"),
        ("<a><![CDATA[x</a>", "Unterminated CDATA section"),
        ("<a><?pi x</a>", "Unterminated processing instruction"),
        ("<car><vin>>", "Unexpected end of document, <vin> element is not closed"),
        ("<a", "Unexpected end of document in <a> start tag"),
        ("<a></b>", "End element </b> does not match start element <a>"),
        ("</a>", "Unexpected end element </a>"),
        ("<a/><b/>", "Extra content after the root element: <b>"),
        ("<a><!-- x -- y --></a>", "String '--' is not allowed in comments"),
        ("<a>&foo;</a>", "Undefined entity reference &foo;"),
        ("<a>&amp</a>", "Entity reference must end with ';'"),
        ("<a>&#0;</a>", "Invalid character reference &#0;"),
        ("<a>&#;</a>", "Invalid character reference &#;"),
        ("<a>\x01</a>", "Invalid XML character U+0001"),
        ("<a>]]></a>", "Sequence ']]>' is not allowed in content"),
        ("<a x=1/>", "Value of attribute 'x' must be quoted"),
        ('<a x="1" x="2"/>', "Duplicate attribute 'x' in <a>"),
        ("<a x/>", "Attribute 'x' has no value"),
        ("<1a/>", "Invalid element name"),
        ('<!DOCTYPE a [<!ENTITY x "y">]><a/>', "DOCTYPE internal subset is not supported"),
        ("<a/><?xml version='1.0'?>", "XML declaration is allowed only at the start"),
        ("<?xml version='2.0'?><a/>", "Unsupported XML version: 2.0"),
        ("<?xml encoding='UTF-8'?><a/>", "XML declaration must specify a version"),
    ])
    def test_malformed(self, text, message):
        """Test that each malformation raises MalformedXMLError."""
        with pytest.raises(MalformedXMLError) as exc_info:
            list(XMLCursor(text))

        assert exc_info.value.message.startswith(message)
        assert exc_info.value.location is not None

    def test_error_location(self):
        """Test that errors point at the offending construct."""
        with pytest.raises(MalformedXMLError) as exc_info:
            list(XMLCursor("<a>\n  <b></c>\n</a>"))

        assert exc_info.value.line == 2
        assert exc_info.value.column == 6

    @pytest.mark.parametrize("text,message", [
        ("<a></b>", "End element </b> does not match start element <a>"),
        ("<a/></a>", "Unexpected end element </a>"),
        ("<a><b/>", "Unexpected end of document, <a> element is not closed"),
    ])
    def test_unbalanced_elements(self, text, message):
        """Test that unbalanced tags are also missing end element errors."""
        with pytest.raises(UnbalancedElementError) as exc_info:
            list(XMLCursor(text))

        assert isinstance(exc_info.value, MalformedXMLError)
        assert isinstance(exc_info.value, MissingEndElementError)
        assert exc_info.value.message == message

    def test_max_depth(self):
        """Test the nesting depth limit."""
        config = ParseConfig(max_depth=2)

        assert event_types("<a><b/></a>", config)[-1] == EventType.END_DOCUMENT
        with pytest.raises(MalformedXMLError, match="Maximum nesting depth of 2 elements exceeded"):
            event_types("<a><b><c/></b></a>", config)

    def test_doctype_rejected(self):
        """Test that DOCTYPE can be disallowed."""
        with pytest.raises(MalformedXMLError, match="DOCTYPE declaration is not allowed"):
            event_types("<!DOCTYPE a><a/>", ParseConfig(allow_doctype=False))


class TestNames:
    """Test suite for XML name validation."""

    @pytest.mark.parametrize("name", ["car", "_x", "a-b.c", "ns:tag", "été"])
    def test_valid_names(self, name):
        """Test valid element names."""
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["", "1a", "-a", "a b", "a<"])
    def test_invalid_names(self, name):
        """Test invalid element names."""
        assert not is_valid_name(name)


class TestCursorFactory:
    """Test suite for CursorFactory."""

    def test_create_cursor(self):
        """Test that factories create independent cursors."""
        first = DEFAULT_CURSOR_FACTORY.create_cursor("<a/>")
        second = DEFAULT_CURSOR_FACTORY.create_cursor("<b/>")

        assert first.next().name == "a"
        assert second.next().name == "b"

    def test_config_precedence(self):
        """Test that a per-call configuration wins over the factory default."""
        factory = CursorFactory(ParseConfig(max_depth=1))

        assert factory.create_cursor("<a/>").config.max_depth == 1
        assert factory.create_cursor("<a/>", ParseConfig(max_depth=7)).config.max_depth == 7
