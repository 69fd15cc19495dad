import pytest

from turtlecanvas.config import GraphicsConfig
from turtlecanvas.device import DeviceRegistry
from turtlecanvas.errors import (AnimationInProgressError, InvalidArgumentError,
                                 SurfaceUnavailableError)
from turtlecanvas.surface import RecordingSurface


def test_default_mapping_puts_origin_at_center(registry):
    device = registry.get_or_create()
    assert device.to_pixels(0, 0) == (200.0, 200.0)
    # y grows upwards
    assert device.to_pixels(0, 50) == (200.0, 150.0)


def test_world_coordinates_map_origin_to_pixel_center(registry):
    device = registry.get_or_create()
    device.set_world_coordinates(-200, -200, 200, 200)
    assert device.to_pixels(0, 0) == pytest.approx((200.0, 200.0))


def test_world_coordinates_with_origin_in_lower_left(registry):
    device = registry.get_or_create()
    device.set_world_coordinates(0, 0, 100, 100)
    assert device.to_pixels(0, 0) == pytest.approx((0.0, 400.0))
    assert device.to_pixels(100, 100) == pytest.approx((400.0, 0.0))
    assert device.line_scale == pytest.approx(0.25)


def test_world_coordinates_with_raised_lower_edge(registry):
    # a positive lower edge translates y by twice its value
    device = registry.get_or_create()
    device.set_world_coordinates(0, 50, 100, 200)
    assert device.surface.find("translate")[-1] == (0, -100)
    assert device.to_pixels(0, 100) == pytest.approx((0.0, 0.0))
    assert device.to_pixels(0, 50) == pytest.approx((0.0, 400 / 3))
    assert device.to_pixels(100, 200) == pytest.approx((400.0, -800 / 3))


def test_world_coordinates_set_line_and_point_scales(registry):
    device = registry.get_or_create()
    device.set_world_coordinates(-1, -2, 1, 2)
    assert device.x_line_scale == pytest.approx(2 / 400)
    assert device.y_line_scale == pytest.approx(4 / 400)
    assert device.line_scale == pytest.approx(2 / 400)
    assert (device.x_point_scale, device.y_point_scale) == (device.x_line_scale, device.y_line_scale)


def test_degenerate_world_box_is_rejected(registry):
    device = registry.get_or_create()
    with pytest.raises(InvalidArgumentError):
        device.set_world_coordinates(0, 0, 0, 10)


def test_mapping_cannot_change_mid_motion(registry):
    device = registry.get_or_create()
    with device.motion():
        with pytest.raises(AnimationInProgressError):
            device.set_world_coordinates(-1, -1, 1, 1)
        with pytest.raises(AnimationInProgressError):
            device.setup(100, 100)
    device.set_world_coordinates(-1, -1, 1, 1)


def test_setup_resets_size_and_scales(registry):
    device = registry.get_or_create()
    device.set_world_coordinates(-1, -1, 1, 1)
    device.setup(640, 480)
    assert (device.window_width(), device.window_height()) == (640, 480)
    assert device.line_scale == 1.0
    assert device.to_pixels(0, 0) == (320.0, 240.0)
    assert device.get_counter() == 1


def test_setup_rejects_non_positive_size(registry):
    with pytest.raises(InvalidArgumentError):
        registry.get_or_create().setup(0, 100)


@pytest.mark.parametrize("speed, expected", [(1, 50.0), (5, 30.0), (10, 5.0), (11, 55.0)])
def test_speed_delay_formula(registry, speed, expected):
    device = registry.get_or_create()
    device.set_speed_delay(speed)
    assert device.get_delay() == pytest.approx(expected)


def test_initial_delay_depends_on_animate_flag():
    animated = DeviceRegistry(GraphicsConfig(surface="recording", animate=True)).get_or_create()
    still = DeviceRegistry(GraphicsConfig(surface="recording", animate=False)).get_or_create()
    assert animated.get_delay() == 25.0
    assert still.get_delay() == 0


@pytest.mark.parametrize("value, expected", [(5, 5), (0, 1), (-3, 1), (None, 1)])
def test_counter_is_at_least_one(registry, value, expected):
    device = registry.get_or_create()
    device.set_counter(value)
    assert device.get_counter() == expected


def test_segment_length_must_be_positive(registry):
    device = registry.get_or_create()
    device.set_segment_length(2.5)
    assert device.get_segment_length() == 2.5
    with pytest.raises(InvalidArgumentError):
        device.set_segment_length(0)


def test_turtle_membership(registry):
    device = registry.get_or_create()
    marker = object()
    assert not device.is_animating()
    device.add_to_canvas(marker)
    device.add_to_canvas(marker)
    assert device.turtles == [marker]
    assert device.on_canvas(marker)
    assert device.is_animating()
    device.remove_from_canvas(marker)
    assert not device.is_animating()


def test_registry_lookup_and_destroy(registry):
    device = registry.get_or_create("other")
    assert registry.get("other") is device
    assert registry.get_or_create("other") is device
    assert "other" in registry
    registry.destroy("other")
    assert "other" not in registry
    with pytest.raises(SurfaceUnavailableError):
        registry.get("other")
    with pytest.raises(SurfaceUnavailableError):
        registry.destroy("other")


def test_registry_default_id_comes_from_config(registry):
    assert registry.get_or_create().canvas_id == "mycanvas"
    assert registry.ids() == ["mycanvas"]


def test_surface_factory_returning_nothing_is_unavailable():
    registry = DeviceRegistry(GraphicsConfig(surface="recording"), surface_factory=lambda canvas_id: None)
    with pytest.raises(SurfaceUnavailableError):
        registry.get_or_create("missing")


def test_overlay_shares_the_world_transform(registry):
    device = registry.get_or_create()
    device.set_world_coordinates(-1, -1, 1, 1)
    overlay = device.overlay
    assert isinstance(overlay, RecordingSurface)
    assert overlay.to_device(0, 0) == pytest.approx(device.to_pixels(0, 0))


def test_clear_wipes_every_layer(registry):
    device = registry.get_or_create()
    overlay = device.overlay
    device.clear()
    assert device.surface.find("clear_rect") == [(0, 0, 400, 400)]
    assert overlay.find("clear_rect") == [(0, 0, 400, 400)]


def test_bgcolor_validates_color(registry):
    device = registry.get_or_create()
    assert device.bgcolor("navy") == "navy"
    assert device.bgcolor() == "navy"
    with pytest.raises(InvalidArgumentError):
        device.bgcolor("not-a-color")


def test_recording_device_cannot_be_rasterized(registry):
    with pytest.raises(InvalidArgumentError):
        registry.get_or_create().to_array()
