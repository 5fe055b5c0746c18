"""Tests for the lxml integration adapter."""

import pytest

from entity_xml_mapper import LxmlAdapter, MapperConfig, XMLError

etree = pytest.importorskip("lxml.etree")


class TestLxmlAdapter:
    """Test suite for LxmlAdapter."""

    def test_is_available(self):
        """Test lxml availability detection."""
        assert LxmlAdapter().is_available() is True

    def test_to_element(self, car_entity, car):
        """Test converting a value to an lxml element."""
        element = LxmlAdapter().to_element(car_entity, car)

        assert element.tag == "car"
        assert element.findtext("vin") == "1A"
        assert element.xpath("count(plate)") == 2
        assert element.find("engine").findtext("fuel") == "diesel"

    def test_from_element(self, car_entity, car):
        """Test parsing a value from an lxml element."""
        element = etree.fromstring(
            "<car><plate>AB</plate><vin>1A</vin><year>2004</year><plate>CD</plate>"
            "<engine><fuel>diesel</fuel></engine><wheel><front>Michelin</front></wheel></car>"
        )

        assert LxmlAdapter().from_element(car_entity, element) == car

    def test_nested_element(self, engine_entity):
        """Test converting a subtree of a larger document."""
        root = etree.fromstring("<car><engine><fuel>lpg</fuel></engine>\n</car>")

        engine = LxmlAdapter().from_element(engine_entity, root.find("engine"))

        assert engine.fuel == "lpg"

    def test_round_trip_ignores_declaration(self, car_entity, car):
        """Test that a configured XML declaration does not reach lxml."""
        adapter = LxmlAdapter(MapperConfig.pretty())

        assert adapter.from_element(car_entity, adapter.to_element(car_entity, car)) == car
        assert adapter.statistics == {"to_element": 1, "from_element": 1}

    def test_not_an_element(self, car_entity):
        """Test that non-elements are rejected."""
        with pytest.raises(XMLError, match="Not an lxml element: str"):
            LxmlAdapter().from_element(car_entity, "<car/>")

    def test_mismatched_element(self, car_entity):
        """Test that mapping errors propagate."""
        with pytest.raises(XMLError, match="Expected <car> start element"):
            LxmlAdapter().from_element(car_entity, etree.fromstring("<truck/>"))
