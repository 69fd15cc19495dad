import pytest

from turtlecanvas.errors import InvalidArgumentError
from turtlecanvas.screen import Screen
from turtlecanvas.turtle import Turtle


def test_setup_and_window_size(registry):
    screen = Screen(registry)
    screen.setup(640, 480)
    assert (screen.window_width(), screen.window_height()) == (640, 480)


def test_screen_and_turtle_share_the_default_device(registry):
    screen = Screen(registry)
    t = Turtle(registry)
    assert screen.turtles() == [t]
    assert screen.device is t.device


def test_bgcolor(registry):
    screen = Screen(registry)
    assert screen.bgcolor() == "white"
    assert screen.bgcolor("#102030") == "#102030"
    with pytest.raises(InvalidArgumentError):
        screen.bgcolor("nope")


def test_tracer_zero_stops_animation_for_all_turtles(animated_registry):
    screen = Screen(animated_registry)
    turtles = [Turtle(animated_registry), Turtle(animated_registry)]
    screen.tracer(0, 3)
    assert not any(t.animate for t in turtles)
    assert screen.device.get_counter() == 1
    assert screen.delay() == 3


def test_exit_on_click_waits_for_turtles(registry):
    screen = Screen(registry)
    t = Turtle(registry)
    close = screen.exit_on_click()
    assert close() is False
    assert screen.canvas_id in registry

    screen.device.remove_from_canvas(t)
    assert close() is True
    assert screen.canvas_id not in registry
    assert close() is True


def test_set_world_coordinates(registry):
    screen = Screen(registry)
    screen.set_world_coordinates(-10, -10, 10, 10)
    assert screen.device.line_scale == pytest.approx(20 / 400)
