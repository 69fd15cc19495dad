import math

import numpy as np
import pytest

from turtlecanvas.errors import InvalidArgumentError
from turtlecanvas.surface import (CairoSurface, RecordingSurface, make_surface, parse_color,
                                  parse_font)


def test_parse_color():
    assert parse_color("#ff0000") == (1.0, 0.0, 0.0, 1.0)
    assert parse_color("white") == (1.0, 1.0, 1.0, 1.0)
    with pytest.raises(InvalidArgumentError):
        parse_color("bluish")


@pytest.mark.parametrize("font, expected", [
    ("bold 12pt Arial", ("Arial", 12.0, True)),
    ("10px sans-serif", ("sans-serif", 10.0, False)),
    ("serif", ("serif", 10.0, False)),
    ("", ("sans-serif", 10.0, False)),
])
def test_parse_font(font, expected):
    assert parse_font(font) == expected


def test_make_surface():
    assert isinstance(make_surface("recording", 10, 10), RecordingSurface)
    assert isinstance(make_surface("cairo", 10, 10), CairoSurface)
    with pytest.raises(InvalidArgumentError):
        make_surface("svg", 10, 10)


def test_recording_surface_tracks_transform_stack():
    surface = RecordingSurface(100, 100)
    surface.translate(50, 50)
    surface.save()
    surface.scale(2, -2)
    assert surface.to_device(1, 1) == (52.0, 48.0)
    surface.restore()
    assert surface.to_device(1, 1) == (51.0, 51.0)


def test_save_restore_covers_styles():
    surface = RecordingSurface(10, 10)
    surface.stroke_style = "red"
    surface.save()
    surface.stroke_style = "blue"
    surface.restore()
    assert surface.stroke_style == "red"
    # unbalanced restore is ignored
    surface.restore()


def test_cairo_line_is_painted():
    surface = CairoSurface(100, 100)
    surface.stroke_style = "#ff0000"
    surface.line_width = 4
    surface.begin_path()
    surface.move_to(10, 50)
    surface.line_to(90, 50)
    surface.stroke()
    image = surface.to_array()
    assert image.shape == (100, 100, 3)
    assert image[50, 50] == pytest.approx([1.0, 0.0, 0.0])
    assert image[10, 10] == pytest.approx([1.0, 1.0, 1.0])


def test_cairo_stroke_keeps_path_for_fill():
    surface = CairoSurface(100, 100)
    surface.fill_style = "#0000ff"
    surface.begin_path()
    surface.move_to(10, 10)
    surface.line_to(90, 10)
    surface.line_to(90, 90)
    surface.line_to(10, 90)
    surface.stroke()
    surface.fill()
    assert surface.to_array()[50, 50] == pytest.approx([0.0, 0.0, 1.0])


def test_cairo_fill_rect_does_not_disturb_path():
    surface = CairoSurface(100, 100)
    surface.begin_path()
    surface.move_to(0, 80)
    surface.fill_style = "black"
    surface.fill_rect(0, 0, 10, 10)
    surface.line_to(100, 80)
    surface.stroke_style = "#00ff00"
    surface.line_width = 4
    surface.stroke()
    image = surface.to_array()
    assert image[5, 5] == pytest.approx([0.0, 0.0, 0.0])
    assert image[80, 50] == pytest.approx([0.0, 1.0, 0.0])


def test_cairo_arc_direction():
    surface = CairoSurface(100, 100)
    surface.stroke_style = "black"
    surface.line_width = 4
    surface.begin_path()
    # upper half in pixel space when tracing from pi to 2 pi
    surface.arc(50, 50, 30, math.pi, 2 * math.pi)
    surface.stroke()
    image = surface.to_array()
    assert image[20, 50].sum() < 0.5
    assert image[80, 50] == pytest.approx([1.0, 1.0, 1.0])


def test_cairo_clear_rect_reveals_background():
    surface = CairoSurface(20, 20)
    surface.set_background("#00ff00")
    surface.fill_style = "black"
    surface.fill_rect(0, 0, 20, 20)
    surface.clear_rect(0, 0, 10, 20)
    image = surface.to_array()
    assert image[5, 5] == pytest.approx([0.0, 1.0, 0.0])
    assert image[5, 15] == pytest.approx([0.0, 0.0, 0.0])


def test_cairo_overlay_composited_on_top():
    surface = CairoSurface(20, 20)
    overlay = surface.create_overlay()
    overlay.fill_style = "red"
    overlay.fill_rect(0, 0, 5, 5)
    assert surface.to_array()[2, 2] == pytest.approx([1.0, 1.0, 1.0])
    assert surface.to_array(overlays=[overlay])[2, 2] == pytest.approx([1.0, 0.0, 0.0])


def test_cairo_resize_clears_and_resets_transform():
    surface = CairoSurface(20, 20)
    surface.translate(5, 5)
    surface.resize(40, 30)
    assert (surface.width, surface.height) == (40, 30)
    assert surface.to_device(1, 1) == (1.0, 1.0)
    assert np.all(surface.to_array() == 1.0)
