import pytest

from turtlecanvas.animation import ImmediateStrategy
from turtlecanvas.config import GraphicsConfig
from turtlecanvas.device import DeviceRegistry
from turtlecanvas.turtle import Turtle


@pytest.fixture
def config():
    return GraphicsConfig(surface="recording", animate=False)


@pytest.fixture
def registry(config):
    return DeviceRegistry(config, strategy=ImmediateStrategy())


@pytest.fixture
def animated_registry():
    return DeviceRegistry(GraphicsConfig(surface="recording", animate=True),
                          strategy=ImmediateStrategy())


@pytest.fixture
def turtle(registry):
    return Turtle(registry)


@pytest.fixture
def animated_turtle(animated_registry):
    return Turtle(animated_registry)
