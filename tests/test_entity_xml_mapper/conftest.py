"""Shared fixtures for entity XML mapper tests."""

import pytest

from entity_xml_mapper import MapperConfig

from car_models import CAR, ENGINE, TRAILER, sample_car


@pytest.fixture
def car_entity():
    return CAR


@pytest.fixture
def engine_entity():
    return ENGINE


@pytest.fixture
def trailer_entity():
    return TRAILER


@pytest.fixture
def car():
    return sample_car()


@pytest.fixture
def compact():
    return MapperConfig.compact()
