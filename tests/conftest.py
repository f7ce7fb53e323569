import pytest

from capkit.core import CapabilityRegistry
from capkit.exercises import Duck, ElectronicDuck, SensingDoor, TimedDoor


@pytest.fixture
def registry():
    return CapabilityRegistry("test")


@pytest.fixture
def door_a():
    return TimedDoor("doorA")


@pytest.fixture
def door_b():
    return SensingDoor("doorB")


@pytest.fixture
def duck():
    return Duck("mallard")


@pytest.fixture
def electronic_duck():
    return ElectronicDuck("robo")
