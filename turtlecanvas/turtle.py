# turtlecanvas/turtle.py
"""
The turtle state machine.

A Turtle holds a pose (position, unit heading and the normal used as its turn
axis), pen and fill state and the shape of its icon. Motions (goto, forward,
circle, ...) are coroutines: awaiting one returns once the motion has been fully
drawn, either immediately or step by step through the registry's Animator.
Motions issued on the same turtle are queued, never interleaved.

Example:
    >>> registry = DeviceRegistry(GraphicsConfig(surface="recording"))
    >>> t = Turtle(registry)
    >>> asyncio.run(t.forward(100))
    Vector(x=100.0, y=0.0, z=0.0)
"""
from __future__ import annotations

import asyncio
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

from .animation import StrokeStyle, segment_arc, segment_line, stroke_segment
from .device import DeviceRegistry
from .errors import DegenerateGeometryError, InvalidArgumentError
from .surface import DrawingSurface
from .vector import DEGREE_TO_RAD, Vector

logger = logging.getLogger(__name__)


## --- Shape Catalog ---
@dataclass(frozen=True)
class Shape:
    """Named outline of a turtle icon, authored pointing up in a -10..10 frame."""
    name: str
    points: Tuple[Vector, ...]


def _shape(name: str, points: Sequence[Tuple[float, float]]) -> Shape:
    return Shape(name, tuple(Vector(x, y) for x, y in points))


SHAPES: Dict[str, Shape] = {s.name: s for s in (
    _shape("turtle", [
        (0, 16), (-2, 14), (-1, 10), (-4, 7), (-7, 9), (-9, 8), (-6, 5), (-7, 1),
        (-5, -3), (-8, -6), (-6, -8), (-4, -5), (0, -7), (4, -5), (6, -8), (8, -6),
        (5, -3), (7, 1), (6, 5), (9, 8), (7, 9), (4, 7), (1, 10), (2, 14),
    ]),
    _shape("arrow", [(-10, 0), (10, 0), (0, 10)]),
    _shape("circle", [
        (10, 0), (9.51, 3.09), (8.09, 5.88), (5.88, 8.09), (3.09, 9.51),
        (0, 10), (-3.09, 9.51), (-5.88, 8.09), (-8.09, 5.88), (-9.51, 3.09),
        (-10, 0), (-9.51, -3.09), (-8.09, -5.88), (-5.88, -8.09), (-3.09, -9.51),
        (-0, -10), (3.09, -9.51), (5.88, -8.09), (8.09, -5.88), (9.51, -3.09),
    ]),
    _shape("square", [(10, -10), (10, 10), (-10, 10), (-10, -10)]),
    _shape("triangle", [(10, -5.77), (0, 11.55), (-10, -5.77)]),
    _shape("blank", [(0, 0)]),
    _shape("classic", [(0, 0), (-5, -9), (0, -7), (5, -9)]),
)}
DEFAULT_SHAPE = "classic"
DEFAULT_DOT_SIZE = 2
DEFAULT_COLOR = "black"

ColorSpec = Union[str, Sequence[float], float]


## --- Argument Helpers ---
def _number(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
    return float(value)


def color_to_style(c: ColorSpec, g: Optional[float] = None, b: Optional[float] = None) -> str:
    """
    Normalizes turtle color arguments to a style string.

    A string is used as-is; three numeric channels (as one sequence or three
    arguments) become ``#rrggbb`` with each channel's absolute value written as
    at least two hex digits.

    Examples:
        >>> color_to_style(255, 0, 0)
        '#ff0000'
        >>> color_to_style((0, 128, 255))
        '#0080ff'
        >>> color_to_style("red")
        'red'
    """
    if g is None and b is None:
        if isinstance(c, str):
            return c
        if not isinstance(c, (list, tuple)) or len(c) != 3:
            raise InvalidArgumentError(f"A color is a name or three channels, got {c!r}")
        channels = c
    elif g is not None and b is not None:
        channels = (c, g, b)
    else:
        raise InvalidArgumentError("A color needs exactly one name or three channels")
    values = [_number(v, "color channel") for v in channels]
    return "#" + "".join(format(abs(int(v)), "02x") for v in values)


@dataclass(frozen=True)
class ArcGeometry:
    """Where an arc is drawn on the surface and where it leaves the turtle."""
    center: Vector
    start_angle: float
    end_angle: float
    counterclockwise: bool
    end_position: Optional[Vector]
    end_heading: Optional[float]


def arc_geometry(position: Vector, heading: float, radius: float, extent: float) -> ArcGeometry:
    """
    Computes the surface arc for a turtle at ``position`` facing ``heading`` degrees.

    The centre lies ``radius`` units to the turtle's left (to its right for a
    negative radius). Turtle angles run counter-clockwise from +x; the surface
    arc expects angles after three conversions: the quarter-turn offset from
    the heading to the centre-relative start angle, the reversal into the
    surface's clockwise convention, and the sign flip that undoes the y-axis
    flip of the device transform. An extent of 0 draws a full circle.

    Returns:
        ArcGeometry; end_position/end_heading are None when the extent is a
        whole number of turns, since such arcs leave the turtle where it was
    """
    cx = position.x + radius * math.cos((heading + 90) * DEGREE_TO_RAD)
    cy = position.y + radius * math.sin((heading + 90) * DEGREE_TO_RAD)

    if radius >= 0:
        start_deg = heading - 90
    else:
        start_deg = heading + 90
    sweep = extent if extent else 360
    end_deg = start_deg + sweep if radius >= 0 else start_deg - sweep

    # surface arcs run clockwise
    start_deg = 360 - start_deg
    end_deg = 360 - end_deg
    # the device flipped the y axis
    start_deg = -start_deg
    end_deg = -end_deg

    end_position = None
    end_heading = None
    if extent and extent % 360 != 0:
        turtle_arc = extent if radius >= 0 else -extent
        end_heading = (heading + turtle_arc) % 360
        end_position = Vector(cx + radius * math.cos((end_heading - 90) * DEGREE_TO_RAD),
                              cy + radius * math.sin((end_heading - 90) * DEGREE_TO_RAD), 0.0)

    return ArcGeometry(center=Vector(cx, cy, 0.0),
                       start_angle=start_deg * DEGREE_TO_RAD,
                       end_angle=end_deg * DEGREE_TO_RAD,
                       counterclockwise=radius * extent <= 0,
                       end_position=end_position,
                       end_heading=end_heading)


class Turtle:
    """
    A turtle drawing on one canvas device of a registry.

    Attributes:
        position (Vector): current position in world coordinates
        heading (Vector): unit vector the turtle faces
        normal (Vector): unit vector orthogonal to heading; normal x heading is the turn axis
        pen (bool): whether motions draw
        pen_color (str): stroke style of lines and arcs
        fill_color (str): style used by end_fill() and the icon
        filling (bool): whether a fill path is open
        visible (bool): whether the icon is shown
        current_shape (str): name of the icon shape
        animate (bool): whether motions are decomposed into timed steps
        device (CanvasDevice): the shared device this turtle draws on

    Examples:
        >>> registry = DeviceRegistry(GraphicsConfig(surface="recording"), strategy=ImmediateStrategy())
        >>> t = Turtle(registry)
        >>> async def square():
        ...     for _ in range(4):
        ...         await t.forward(50)
        ...         t.left(90)
        >>> asyncio.run(square())
    """
    def __init__(self, registry: DeviceRegistry, canvas_id: Optional[str] = None,
                 animate: Optional[bool] = None):
        self.registry = registry
        self.device = registry.get_or_create(canvas_id)
        self.animator = registry.animator
        self.degrees = registry.config.degrees
        self.default_pen_width = registry.config.pen_width
        self.default_segment_length = registry.config.segment_length
        self._default_animate = registry.config.animate if animate is None else animate
        self.shapes: Dict[str, Shape] = dict(SHAPES)
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._heading_revision = 0
        self._initialize()
        self.device.add_to_canvas(self)

    def _initialize(self) -> None:
        self.home_position = Vector(0.0, 0.0, 0.0)
        self.animate = self._default_animate
        self.visible = True
        self.current_shape = DEFAULT_SHAPE
        self.filling = False
        self.pen = True
        self.pen_color = DEFAULT_COLOR
        self.pen_width = self.default_pen_width
        self.fill_color = DEFAULT_COLOR
        self.go_home()

    def __repr__(self) -> str:
        return (f"Turtle(canvas='{self.device.canvas_id}', position=({self.position.x:.2f}, "
                f"{self.position.y:.2f}), heading={self.heading.to_angle():.2f})")

    def _serialized(self) -> asyncio.Lock:
        # one lock per event loop; motions on this turtle wait their turn
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    ## --- Pose ---
    def go_home(self) -> None:
        """Puts the turtle at the origin facing +x, without drawing."""
        self.position = self.home_position
        self.device.surface.move_to(self.home_position.x, self.home_position.y)
        self.heading = Vector(1.0, 0.0, 0.0)
        self.normal = Vector(0.0, 0.0, -1.0)

    home = go_home

    def turn(self, phi: float) -> None:
        """Turns clockwise by ``phi`` degrees within the heading/normal plane."""
        alpha = _number(phi, "angle") * DEGREE_TO_RAD
        axis = self.normal.cross(self.heading)
        self.heading = self.heading.rotate_normal(axis, alpha)
        self._heading_revision += 1
        self._refresh_icon()

    right = turn

    def left(self, phi: float) -> None:
        self.turn(-_number(phi, "angle"))

    def set_heading(self, new_heading: Union[float, Vector]) -> None:
        """
        Sets the heading from a vector or an angle in degrees.

        Raises:
            DegenerateGeometryError: If the vector has zero length
        """
        if isinstance(new_heading, numbers.Real) and not isinstance(new_heading, bool):
            heading = Vector.from_angle(float(new_heading))
        else:
            heading = Vector.of(new_heading)
            if heading.length() == 0:
                raise DegenerateGeometryError("Cannot take the zero vector as a heading")
            heading = heading.normalize()
        self.heading = heading
        self._heading_revision += 1
        self._refresh_icon()

    def _face(self, degrees: float) -> None:
        # motion-driven heading change; not counted as a user turn
        self.heading = Vector.from_angle(degrees)
        self._refresh_icon()

    def get_heading(self) -> float:
        deg = self.heading.to_angle()
        return deg if self.degrees else deg * DEGREE_TO_RAD

    def get_position(self) -> Tuple[float, float]:
        return self.position.x, self.position.y

    def xcor(self) -> float:
        return self.position.x

    def ycor(self) -> float:
        return self.position.y

    def _point(self, x, y=None) -> Vector:
        if isinstance(x, Turtle):
            return x.position
        if y is None:
            return Vector.of(x)
        return Vector(_number(x, "x"), _number(y, "y"), 0.0)

    def towards(self, x, y=None) -> float:
        """Angle from the turtle to a point (or another turtle)."""
        res = self._point(x, y).sub(self.position).normalize()
        deg = res.to_angle()
        return deg if self.degrees else deg * DEGREE_TO_RAD

    def distance(self, x, y=None) -> float:
        return self.position.sub(self._point(x, y)).length()

    ## --- Motion ---
    async def forward(self, d: float) -> Vector:
        d = _number(d, "distance")
        async with self._serialized():
            return await self._move_to(self.position.linear(1, d, self.heading))

    async def backward(self, d: float) -> Vector:
        return await self.forward(-_number(d, "distance"))

    async def goto(self, x, y=None, *, suppress_pen: bool = False) -> Vector:
        """
        Moves to a point, drawing a line when the pen is down.

        Args:
            x: x coordinate, or a Vector / (x, y) pair when y is omitted
            y: y coordinate
            suppress_pen: Move without drawing even if the pen is down

        Returns:
            The position once the motion has been drawn
        """
        target = self._point(x, y)
        async with self._serialized():
            return await self._move_to(target, suppress_pen)

    async def setposition(self, x, y=None) -> Vector:
        return await self.goto(x, y, suppress_pen=True)

    async def setx(self, x: float) -> Vector:
        x = _number(x, "x")
        async with self._serialized():
            return await self._move_to(Vector(x, self.position.y, 0.0))

    async def sety(self, y: float) -> Vector:
        y = _number(y, "y")
        async with self._serialized():
            return await self._move_to(Vector(self.position.x, y, 0.0))

    async def _move_to(self, new_position: Vector, suppress_pen: bool = False) -> Vector:
        if self.pen and not suppress_pen:
            return await self._draw_line(new_position)
        if not self.animate:
            self.device.surface.move_to(new_position.x, new_position.y)
            self.position = new_position
            self._refresh_icon()
            return new_position
        steps = segment_line(self.position, new_position, self.device.get_segment_length(), False)
        return await self.animator.run(self, steps, new_position=new_position)

    async def _draw_line(self, new_position: Vector) -> Vector:
        style = StrokeStyle(self.pen_color, self.get_pen_width())
        if not self.animate:
            stroke_segment(self.device.surface, self.position, new_position, style, self.filling)
            self.position = new_position
            self._refresh_icon()
            return new_position
        steps = segment_line(self.position, new_position, self.device.get_segment_length(), True, style)
        return await self.animator.run(self, steps, new_position=new_position)

    async def circle(self, radius: float, extent: Optional[float] = None) -> Vector:
        """
        Draws a circle or arc of ``radius``; the centre is on the turtle's left for positive radii.

        Whole turns leave the turtle where it started; any other extent moves
        the turtle to the end of the arc and turns it accordingly.
        """
        radius = _number(radius, "radius")
        extent = 360.0 if extent is None else _number(extent, "extent")
        async with self._serialized():
            if radius == 0:
                logger.debug("Ignoring zero radius circle")
                return self.position
            if not self.animate:
                self.arc(radius, extent)
                self._refresh_icon()
                return self.position
            geometry = arc_geometry(self.position, self.heading.to_angle(), radius, extent)
            if geometry.end_position is not None:
                end_position = geometry.end_position
                end_heading = Vector.from_angle(geometry.end_heading)
            else:
                end_position, end_heading = self.position, self.heading
            steps = segment_arc(radius, extent, self.device.get_segment_length())
            revision = self._heading_revision
            await self.animator.run(self, steps)
            # a turn made mid-arc bent the rest of the path; keep the pose it reached
            if self._heading_revision == revision:
                self.position, self.heading = end_position, end_heading
            else:
                logger.debug("Heading changed during circle; keeping the reached pose")
            return self.position

    def arc(self, radius: float, extent: Optional[float] = None) -> None:
        """Draws an arc in one go and moves the turtle to its end."""
        radius = _number(radius, "radius")
        extent = 360.0 if extent is None else _number(extent, "extent")
        if radius == 0:
            logger.debug("Ignoring zero radius arc")
            return
        g = arc_geometry(self.position, self.heading.to_angle(), radius, extent)
        surface = self.device.surface
        if not self.filling:
            surface.begin_path()
        surface.line_cap = "round"
        surface.line_join = "round"
        surface.line_width = self.get_pen_width()
        surface.stroke_style = self.pen_color
        surface.arc(g.center.x, g.center.y, abs(radius), g.start_angle, g.end_angle, g.counterclockwise)
        surface.stroke()
        if not self.filling:
            surface.close_path()

        if g.end_position is not None:
            self.position = g.end_position
            self._face(g.end_heading)

    ## --- Drawing ---
    def dot(self, size: Optional[float] = None, color: Optional[ColorSpec] = None) -> None:
        """Paints a filled square of side ``size`` centred on the turtle."""
        size = DEFAULT_DOT_SIZE if size is None else _number(size, "size")
        style = color_to_style(color) if color is not None else None
        size = size * self.device.line_scale
        surface = self.device.surface

        previous = (surface.fill_style, surface.stroke_style)
        surface.fill_style = style or self.fill_color
        if style:
            surface.stroke_style = style
        surface.fill_rect(self.position.x - size / 2, self.position.y - size / 2, size, size)
        surface.fill_style, surface.stroke_style = previous

    def write(self, text, font: Optional[str] = None) -> None:
        surface = self.device.surface
        if font:
            surface.font = font
        surface.fill_style = self.pen_color
        # text would be drawn upside down in the y-up world
        surface.scale(1, -1)
        surface.fill_text(str(text), self.position.x, -self.position.y)
        surface.scale(1, -1)

    def begin_fill(self) -> None:
        self.filling = True
        surface = self.device.surface
        surface.begin_path()
        surface.move_to(self.position.x, self.position.y)

    def end_fill(self) -> None:
        if not self.filling:
            logger.debug("end_fill() without begin_fill()")
            return
        surface = self.device.surface
        surface.line_width = self.get_pen_width()
        surface.stroke_style = self.pen_color
        surface.fill_style = self.fill_color
        surface.stroke()
        surface.fill()
        surface.close_path()
        self.filling = False

    def fill(self, flag: Optional[bool] = None) -> Optional[bool]:
        if flag is None:
            return self.filling
        if flag:
            self.begin_fill()
        else:
            self.end_fill()
        return None

    def clear(self) -> None:
        """Erases the drawing and restores the default pen and fill styles."""
        self.device.clear()
        self.pen_color = DEFAULT_COLOR
        self.pen_width = self.default_pen_width
        self.fill_color = DEFAULT_COLOR
        self._refresh_icon()

    def reset(self) -> None:
        """Erases the drawing and puts the turtle back in its initial state."""
        self.device.clear()
        self._initialize()
        self._refresh_icon()

    ## --- Icon ---
    def draw_turtle_icon(self, heading: Optional[float] = None, position: Optional[Vector] = None,
                         permanent: bool = False) -> None:
        """
        Renders the turtle icon.

        Args:
            heading: Heading in degrees to draw with instead of the current one
            position: Position to draw at instead of the current one
            permanent: Paint onto the drawing itself (a stamp) rather than onto
                the icon overlay, which is cleared and redrawn every time
        """
        if permanent:
            self._paint_icon(self.device.surface, heading, position)
            return
        overlay = self.device.clear_overlay()
        for turtle in self.device.turtles:
            if turtle is self:
                if self.visible:
                    self._paint_icon(overlay, heading, position)
            elif turtle.visible:
                turtle._paint_icon(overlay)

    def _paint_icon(self, surface: DrawingSurface, heading: Optional[float] = None,
                    position: Optional[Vector] = None) -> None:
        # icons are authored pointing up
        head = (self.heading.to_angle() if heading is None else _number(heading, "heading")) - 90
        pos = self.position if position is None else Vector.of(position)
        device = self.device
        points = [p.scale(device.x_point_scale, device.y_point_scale).rotate(head).add(pos)
                  for p in self.shapes[self.current_shape].points]

        surface.begin_path()
        surface.move_to(points[0].x, points[0].y)
        for p in points[1:]:
            surface.line_to(p.x, p.y)
        surface.close_path()
        surface.line_width = device.line_scale
        surface.stroke_style = self.pen_color
        surface.stroke()
        if self.fill_color:
            surface.fill_style = self.fill_color
            surface.fill()

    def _refresh_icon(self) -> None:
        if self.visible:
            self.draw_turtle_icon()

    def stamp(self) -> None:
        self.draw_turtle_icon(permanent=True)

    def show_turtle(self) -> None:
        self.visible = True
        self.draw_turtle_icon()

    def hide_turtle(self) -> None:
        self.visible = False
        self.draw_turtle_icon()

    def is_visible(self) -> bool:
        return self.visible

    def shape(self, name: Optional[str] = None) -> str:
        if name is None:
            return self.current_shape
        if name not in self.shapes:
            raise InvalidArgumentError(f"Unknown shape '{name}', expected one of {sorted(self.shapes)}")
        self.current_shape = name
        self._refresh_icon()
        return name

    ## --- Pen & Colors ---
    def pen_down(self) -> None:
        self.pen = True

    def pen_up(self) -> None:
        self.pen = False

    def is_down(self) -> bool:
        return self.pen

    def set_pen_width(self, w: float) -> None:
        self.pen_width = _number(w, "width")

    def get_pen_width(self) -> float:
        """Pen width in world units for the current world mapping."""
        return self.pen_width * self.device.line_scale

    def set_pen_color(self, c: ColorSpec, g: Optional[float] = None, b: Optional[float] = None) -> str:
        self.pen_color = color_to_style(c, g, b)
        self.device.surface.stroke_style = self.pen_color
        return self.pen_color

    def set_fill_color(self, c: ColorSpec, g: Optional[float] = None, b: Optional[float] = None) -> str:
        self.fill_color = color_to_style(c, g, b)
        self.device.surface.fill_style = self.fill_color
        return self.fill_color

    def color(self, c: Optional[ColorSpec] = None, g: Optional[float] = None,
              b: Optional[float] = None) -> Tuple[str, str]:
        """Sets pen and fill color together; returns (pen_color, fill_color)."""
        if c is not None:
            style = color_to_style(c, g, b)
            self.set_pen_color(style)
            self.set_fill_color(style)
        return self.pen_color, self.fill_color

    ## --- Animation Control ---
    def speed(self, s: float, segment_length: Optional[float] = None) -> None:
        """
        Sets the animation speed; 0 turns animation off.

        Args:
            s: Speed level; mapped to a delay by CanvasDevice.set_speed_delay
            segment_length: World units per animation step (default from config)
        """
        s = _number(s, "speed")
        if segment_length is not None:
            segment_length = _number(segment_length, "segment length")
        if s > 0 and not self.animate:
            self.animate = True
            self.device.set_speed_delay(s)
        elif s == 0:
            self.animate = False
            self.device.reset_render_count()
        else:
            self.device.set_speed_delay(s)
        self.device.set_segment_length(segment_length or self.default_segment_length)

    def delay(self, d: Optional[float] = None) -> float:
        if d is not None:
            self.device.set_delay(abs(_number(d, "delay")))
        return self.device.get_delay()

    def tracer(self, n: Optional[int], d: Optional[float] = None) -> None:
        """Renders only every ``n``-th animation step with a delay; 0 turns animation off."""
        self.device.set_counter(n)
        if n == 0:
            self.animate = False
            self.device.reset_render_count()
        if d is not None:
            self.device.set_delay(_number(d, "delay"))

    def set_world_coordinates(self, llx: float, lly: float, urx: float, ury: float) -> None:
        self.device.set_world_coordinates(_number(llx, "llx"), _number(lly, "lly"),
                                          _number(urx, "urx"), _number(ury, "ury"))
