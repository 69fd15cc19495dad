# turtlecanvas/surface.py
"""
Drawing surface adapters used by the canvas device and the turtles.

This module defines the contract a paintable 2D surface must honour and ships
two implementations of it:
- CairoSurface: a raster surface backed by Cairo graphics
- RecordingSurface: an in-memory surface that records every drawing call and
  tracks the current affine transform, used for headless runs and tests

The contract follows HTML5 canvas semantics rather than Cairo's: stroking or
filling keeps the current path, so a fill that spans many line segments can be
stroked piece by piece and filled once at the end.
"""
import abc
import logging
import re
from typing import List, Optional, Sequence, Tuple

import cairo
import numpy as np
from PIL import ImageColor

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


## --- Defaults ---
DEFAULT_STYLE = "black"
DEFAULT_FONT = "10px sans-serif"
DEFAULT_BACKGROUND = "white"

_FONT_SIZE = re.compile(r"(\d+(?:\.\d+)?)\s*(px|pt)?", re.IGNORECASE)
_CAIRO_CAPS = {
    "butt": cairo.LINE_CAP_BUTT,
    "round": cairo.LINE_CAP_ROUND,
    "square": cairo.LINE_CAP_SQUARE,
}
_CAIRO_JOINS = {
    "miter": cairo.LINE_JOIN_MITER,
    "round": cairo.LINE_JOIN_ROUND,
    "bevel": cairo.LINE_JOIN_BEVEL,
}


def parse_color(color: str) -> Tuple[float, float, float, float]:
    """
    Converts a CSS color string into an RGBA tuple with components in [0, 1].

    Args:
        color: A color name ("red"), hex string ("#ff0000", "#f00") or any
            other form understood by Pillow's ImageColor

    Returns:
        (r, g, b, a) floats

    Raises:
        InvalidArgumentError: If the string is not a recognised color

    Examples:
        >>> parse_color("#ff0000")
        (1.0, 0.0, 0.0, 1.0)
    """
    try:
        rgb = ImageColor.getrgb(str(color))
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown color: {color!r}") from e
    alpha = rgb[3] / 255.0 if len(rgb) == 4 else 1.0
    return rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0, alpha


def parse_font(font: str) -> Tuple[str, float, bool]:
    """Splits a CSS-like font string ("bold 12pt Arial") into (family, size, bold)."""
    match = _FONT_SIZE.search(font or "")
    size = float(match.group(1)) if match else 10.0
    family = (font[match.end():] if match else font or "").strip() or "sans-serif"
    return family, size, "bold" in (font or "").lower()


class DrawingSurface(abc.ABC):
    """
    Abstract base class for paintable 2D surfaces.

    Style attributes are plain attributes read at paint time, exactly like the
    settable properties of a canvas context. ``save``/``restore`` push and pop
    the style state; subclasses extend them to cover the transform.

    Attributes:
        width (int): pixel width
        height (int): pixel height
        stroke_style (str): color used by stroke()
        fill_style (str): color used by fill(), fill_rect() and fill_text()
        line_width (float): stroke width in user units
        line_cap (str): "butt", "round" or "square"
        line_join (str): "miter", "round" or "bevel"
        font (str): CSS-like font used by fill_text()
        background (str): background color, painted beneath everything on export
    """
    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.stroke_style = DEFAULT_STYLE
        self.fill_style = DEFAULT_STYLE
        self.line_width = 1.0
        self.line_cap = "butt"
        self.line_join = "miter"
        self.font = DEFAULT_FONT
        self.background = DEFAULT_BACKGROUND
        self._style_stack: List[tuple] = []

    def _style_state(self) -> tuple:
        return (self.stroke_style, self.fill_style, self.line_width,
                self.line_cap, self.line_join, self.font)

    def save(self) -> None:
        self._style_stack.append(self._style_state())

    def restore(self) -> None:
        if not self._style_stack:
            return
        (self.stroke_style, self.fill_style, self.line_width,
         self.line_cap, self.line_join, self.font) = self._style_stack.pop()

    def set_background(self, color: str) -> None:
        self.background = color

    def resize(self, width: int, height: int) -> None:
        """Resets the surface to a blank one of the given size with the identity transform."""
        self.width = int(width)
        self.height = int(height)
        self._style_stack.clear()

    @abc.abstractmethod
    def begin_path(self) -> None: ...

    @abc.abstractmethod
    def move_to(self, x: float, y: float) -> None: ...

    @abc.abstractmethod
    def line_to(self, x: float, y: float) -> None: ...

    @abc.abstractmethod
    def close_path(self) -> None: ...

    @abc.abstractmethod
    def stroke(self) -> None:
        """Strokes the current path with stroke_style, keeping the path."""

    @abc.abstractmethod
    def fill(self) -> None:
        """Fills the current path with fill_style, keeping the path."""

    @abc.abstractmethod
    def arc(self, cx: float, cy: float, radius: float,
            start_angle: float, end_angle: float, counterclockwise: bool = False) -> None:
        """
        Adds a circular arc to the current path.

        Angles are in radians in user space. With ``counterclockwise`` False
        the arc is traced with increasing angle, otherwise with decreasing angle.
        """

    @abc.abstractmethod
    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        """Paints a filled rectangle without touching the current path."""

    @abc.abstractmethod
    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        """Makes a rectangle fully transparent without touching the current path."""

    @abc.abstractmethod
    def fill_text(self, text: str, x: float, y: float) -> None: ...

    @abc.abstractmethod
    def translate(self, tx: float, ty: float) -> None: ...

    @abc.abstractmethod
    def scale(self, sx: float, sy: float) -> None: ...

    @abc.abstractmethod
    def reset_transform(self) -> None: ...

    @abc.abstractmethod
    def to_device(self, x: float, y: float) -> Tuple[float, float]:
        """Maps a user-space point to pixel coordinates under the current transform."""

    @abc.abstractmethod
    def create_overlay(self) -> "DrawingSurface":
        """Creates a transparent surface of the same size stacked above this one."""


class CairoSurface(DrawingSurface):
    """
    Raster drawing surface backed by a Cairo ARGB32 image surface.

    Examples:
        >>> surface = CairoSurface(200, 200)
        >>> surface.begin_path(); surface.move_to(0, 0); surface.line_to(100, 100)
        >>> surface.stroke()
        >>> surface.to_array().shape
        (200, 200, 3)
    """
    def __init__(self, width: int, height: int):
        super().__init__(width, height)
        self._surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, self.width, self.height)
        self._ctx = cairo.Context(self._surface)
        self._depth = 0

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        self._surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, self.width, self.height)
        self._ctx = cairo.Context(self._surface)
        self._depth = 0

    def save(self) -> None:
        super().save()
        self._ctx.save()
        self._depth += 1

    def restore(self) -> None:
        super().restore()
        # cairo raises on an unbalanced restore; the canvas contract ignores it
        if self._depth:
            self._ctx.restore()
            self._depth -= 1

    def _apply_stroke_style(self) -> None:
        self._ctx.set_source_rgba(*parse_color(self.stroke_style))
        self._ctx.set_line_width(self.line_width)
        self._ctx.set_line_cap(_CAIRO_CAPS.get(self.line_cap, cairo.LINE_CAP_BUTT))
        self._ctx.set_line_join(_CAIRO_JOINS.get(self.line_join, cairo.LINE_JOIN_MITER))

    def begin_path(self) -> None:
        self._ctx.new_path()

    def move_to(self, x: float, y: float) -> None:
        self._ctx.move_to(x, y)

    def line_to(self, x: float, y: float) -> None:
        self._ctx.line_to(x, y)

    def close_path(self) -> None:
        self._ctx.close_path()

    def stroke(self) -> None:
        self._apply_stroke_style()
        self._ctx.stroke_preserve()

    def fill(self) -> None:
        self._ctx.set_source_rgba(*parse_color(self.fill_style))
        self._ctx.fill_preserve()

    def arc(self, cx, cy, radius, start_angle, end_angle, counterclockwise=False):
        if counterclockwise:
            self._ctx.arc_negative(cx, cy, radius, start_angle, end_angle)
        else:
            self._ctx.arc(cx, cy, radius, start_angle, end_angle)

    def _paint_detached(self, paint) -> None:
        # paint a shape without disturbing the path being built
        saved_path = self._ctx.copy_path()
        self._ctx.new_path()
        paint()
        self._ctx.new_path()
        self._ctx.append_path(saved_path)

    def fill_rect(self, x, y, w, h):
        def paint():
            self._ctx.rectangle(x, y, w, h)
            self._ctx.set_source_rgba(*parse_color(self.fill_style))
            self._ctx.fill()
        self._paint_detached(paint)

    def clear_rect(self, x, y, w, h):
        def paint():
            self._ctx.save()
            self._ctx.set_operator(cairo.OPERATOR_CLEAR)
            self._ctx.rectangle(x, y, w, h)
            self._ctx.fill()
            self._ctx.restore()
        self._paint_detached(paint)

    def fill_text(self, text, x, y):
        family, size, bold = parse_font(self.font)

        def paint():
            weight = cairo.FONT_WEIGHT_BOLD if bold else cairo.FONT_WEIGHT_NORMAL
            self._ctx.select_font_face(family, cairo.FONT_SLANT_NORMAL, weight)
            self._ctx.set_font_size(size)
            self._ctx.set_source_rgba(*parse_color(self.fill_style))
            self._ctx.move_to(x, y)
            self._ctx.show_text(str(text))
        self._paint_detached(paint)

    def translate(self, tx, ty):
        self._ctx.translate(tx, ty)

    def scale(self, sx, sy):
        self._ctx.scale(sx, sy)

    def reset_transform(self):
        self._ctx.identity_matrix()

    def to_device(self, x, y):
        return self._ctx.user_to_device(x, y)

    def create_overlay(self) -> "CairoSurface":
        return CairoSurface(self.width, self.height)

    def to_array(self, overlays: Sequence["CairoSurface"] = ()) -> np.ndarray:
        """
        Composites the background, this surface and any overlays into an RGB image.

        Args:
            overlays: Surfaces painted on top, in order (e.g. the turtle icon layer)

        Returns:
            numpy array of shape (height, width, 3) with RGB values in [0, 1]
        """
        composite = cairo.ImageSurface(cairo.FORMAT_ARGB32, self.width, self.height)
        ctx = cairo.Context(composite)
        ctx.set_source_rgba(*parse_color(self.background))
        ctx.paint()
        for layer in (self, *overlays):
            layer._surface.flush()
            ctx.set_source_surface(layer._surface, 0, 0)
            ctx.paint()
        composite.flush()

        # --- Extract Buffer ---
        buf = composite.get_data()
        img_array = np.ndarray(shape=(self.height, self.width, 4), dtype=np.uint8, buffer=buf)
        return img_array[:, :, [2, 1, 0]].astype(np.float32) / 255.0  # BGRA to RGB


def _translation(tx: float, ty: float) -> np.ndarray:
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])


def _scaling(sx: float, sy: float) -> np.ndarray:
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])


class RecordingSurface(DrawingSurface):
    """
    Surface that paints nothing and records every call instead.

    Each entry of ``calls`` is ``(name, args)``. Paint calls record the style
    in effect when they ran, e.g. ``("stroke", ("red", 2.0))``. The affine
    transform is tracked as a 3x3 matrix so tests can map world coordinates
    to pixels with ``to_device``.

    Examples:
        >>> surface = RecordingSurface(400, 400)
        >>> surface.translate(200, 200); surface.scale(1, -1)
        >>> surface.to_device(0, 50)
        (200.0, 150.0)
    """
    def __init__(self, width: int, height: int):
        super().__init__(width, height)
        self.calls: List[Tuple[str, tuple]] = []
        self.matrix = np.eye(3)
        self._matrix_stack: List[np.ndarray] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def find(self, name: str) -> List[tuple]:
        return [args for call, args in self.calls if call == name]

    def reset_calls(self) -> None:
        self.calls.clear()

    def resize(self, width, height):
        super().resize(width, height)
        self.matrix = np.eye(3)
        self._matrix_stack.clear()
        self._record("resize", self.width, self.height)

    def save(self):
        super().save()
        self._matrix_stack.append(self.matrix.copy())

    def restore(self):
        super().restore()
        if self._matrix_stack:
            self.matrix = self._matrix_stack.pop()

    def begin_path(self):
        self._record("begin_path")

    def move_to(self, x, y):
        self._record("move_to", x, y)

    def line_to(self, x, y):
        self._record("line_to", x, y)

    def close_path(self):
        self._record("close_path")

    def stroke(self):
        self._record("stroke", self.stroke_style, self.line_width)

    def fill(self):
        self._record("fill", self.fill_style)

    def arc(self, cx, cy, radius, start_angle, end_angle, counterclockwise=False):
        self._record("arc", cx, cy, radius, start_angle, end_angle, counterclockwise)

    def fill_rect(self, x, y, w, h):
        self._record("fill_rect", x, y, w, h, self.fill_style)

    def clear_rect(self, x, y, w, h):
        self._record("clear_rect", x, y, w, h)

    def fill_text(self, text, x, y):
        self._record("fill_text", text, x, y, self.font)

    def translate(self, tx, ty):
        self.matrix = self.matrix @ _translation(tx, ty)
        self._record("translate", tx, ty)

    def scale(self, sx, sy):
        self.matrix = self.matrix @ _scaling(sx, sy)
        self._record("scale", sx, sy)

    def reset_transform(self):
        self.matrix = np.eye(3)
        self._record("reset_transform")

    def to_device(self, x, y):
        px, py, _ = self.matrix @ np.array([x, y, 1.0])
        return float(px), float(py)

    def create_overlay(self) -> "RecordingSurface":
        return RecordingSurface(self.width, self.height)


def make_surface(kind: str, width: int, height: int) -> DrawingSurface:
    """
    Builds a surface by name.

    Args:
        kind: "cairo" or "recording"
        width: Pixel width
        height: Pixel height

    Raises:
        InvalidArgumentError: For an unknown surface kind
    """
    surfaces = {"cairo": CairoSurface, "recording": RecordingSurface}
    if kind not in surfaces:
        raise InvalidArgumentError(f"Unknown surface kind '{kind}', expected one of {sorted(surfaces)}")
    logger.debug("Creating %s surface %dx%d", kind, width, height)
    return surfaces[kind](width, height)
