# turtlecanvas/device.py
"""
Canvas devices and the registry that owns them.

A CanvasDevice wraps one drawing surface and holds everything turtles drawing
on it share: the world-to-pixel mapping, the animation delay and segment
length, the render throttle and the list of registered turtles. Devices are
looked up by surface id through an explicit DeviceRegistry that the composing
application creates and hands to its turtles.
"""
import logging
import math
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .animation import Animator, SchedulingStrategy, ThrottledStrategy
from .config import GraphicsConfig
from .errors import AnimationInProgressError, InvalidArgumentError, SurfaceUnavailableError
from .surface import CairoSurface, DrawingSurface, make_surface, parse_color

logger = logging.getLogger(__name__)

TransformOp = Tuple[str, Tuple[float, float]]


class CanvasDevice:
    """
    Coordinate mapping and animation policy for a single drawing surface.

    The surface's native origin is the top-left corner with y growing
    downwards; the device installs a transform that puts world (0, 0) at the
    centre with y growing upwards, or maps an arbitrary world box onto the full
    pixel area after set_world_coordinates().

    Attributes:
        canvas_id (str): id of the surface in its registry
        surface (DrawingSurface): the persistent drawing surface
        delay (float): milliseconds paid by a throttled animation step
        segment_length (float): world units per animation step
        line_scale (float): world units per pixel used for pen widths and dots
        x_point_scale (float): world units per pixel along x, used for icons
        y_point_scale (float): world units per pixel along y, used for icons
    """
    def __init__(self, canvas_id: str, surface: DrawingSurface, config: GraphicsConfig):
        self.canvas_id = canvas_id
        self.surface = surface
        self.animate_by_default = config.animate
        self.time_factor = config.time_factor
        self.segment_length = config.segment_length
        self.surface.set_background(config.background)
        self._turtles: List = []
        self._overlay: Optional[DrawingSurface] = None
        self._in_flight = 0
        self._transform: List[TransformOp] = []
        self.setup(surface.width, surface.height)

    ## --- Setup & World Coordinates ---
    def setup(self, width: int, height: int) -> None:
        """
        Resizes the surface and resets the mapping, scales and throttle state.

        The surface is cleared; world (0, 0) ends up at the centre of the
        surface with y increasing upwards.
        """
        self._check_idle("setup")
        if width <= 0 or height <= 0:
            raise InvalidArgumentError(f"Surface size must be positive, got {width}x{height}")
        self.surface.resize(width, height)
        if self._overlay is not None:
            self._overlay.resize(width, height)
        self.width = self.surface.width
        self.height = self.surface.height

        self.x_line_scale = 1.0
        self.y_line_scale = 1.0
        self.line_scale = 1.0
        self.x_point_scale = 1.0
        self.y_point_scale = 1.0
        self.llx = -self.width / 2
        self.lly = -self.height / 2
        self.urx = self.width / 2
        self.ury = self.height / 2

        self.render_counter = 1
        self._render_count = 0
        self.delay = 5 * self.time_factor if self.animate_by_default else 0

        self._transform = [
            ("translate", (self.width / 2, self.height / 2)),  # move 0,0 to center
            ("scale", (1, -1)),                                # flip the y axis
        ]
        self._apply_transform()
        logger.debug("Device '%s' set up at %dx%d", self.canvas_id, self.width, self.height)

    def set_world_coordinates(self, llx: float, lly: float, urx: float, ury: float) -> None:
        """
        Maps the world box (llx, lly)-(urx, ury) onto the whole pixel area.

        Args:
            llx, lly: World coordinates of the lower left corner
            urx, ury: World coordinates of the upper right corner

        Raises:
            InvalidArgumentError: If the box has zero width or height
            AnimationInProgressError: If a motion is being drawn on this device
        """
        self._check_idle("set_world_coordinates")
        if urx == llx or ury == lly:
            raise InvalidArgumentError(f"Degenerate world box ({llx}, {lly}, {urx}, {ury})")

        if lly == 0:
            translation = (-llx, lly - (ury - lly))
        elif lly > 0:
            translation = (-llx, -lly * 2)
        else:
            translation = (-llx, -ury)
        self._transform = [
            ("scale", (self.width / (urx - llx), -self.height / (ury - lly))),
            ("translate", translation),
        ]
        self._apply_transform()

        self.x_line_scale = (urx - llx) / self.width
        self.y_line_scale = (ury - lly) / self.height
        self.x_point_scale = self.x_line_scale
        self.y_point_scale = self.y_line_scale
        self.line_scale = min(self.x_line_scale, self.y_line_scale)
        self.llx, self.lly, self.urx, self.ury = llx, lly, urx, ury
        logger.debug("Device '%s' world coordinates set to (%s, %s, %s, %s)",
                     self.canvas_id, llx, lly, urx, ury)

    def _apply_transform(self) -> None:
        for layer in self._layers():
            layer.reset_transform()
            for op, args in self._transform:
                getattr(layer, op)(*args)

    def _layers(self) -> List[DrawingSurface]:
        return [self.surface] if self._overlay is None else [self.surface, self._overlay]

    def _check_idle(self, operation: str) -> None:
        if self._in_flight:
            raise AnimationInProgressError(
                f"{operation}() called on device '{self.canvas_id}' while {self._in_flight} motion(s) are in flight")

    def to_pixels(self, x: float, y: float) -> Tuple[float, float]:
        return self.surface.to_device(x, y)

    ## --- Animation Policy ---
    def set_delay(self, d: float) -> None:
        self.delay = d

    def get_delay(self) -> float:
        return self.delay

    def set_speed_delay(self, s: float) -> None:
        # fmod keeps the sign of s, like the % of the original speed formula
        df = 10 - math.fmod(s, 11) + 1
        self.delay = df * self.time_factor

    def set_counter(self, s: Optional[int]) -> None:
        if not s or s <= 0:
            s = 1
        self.render_counter = s

    def get_counter(self) -> int:
        return self.render_counter

    def reset_render_count(self) -> None:
        self._render_count = 0

    def increment_render_count(self) -> int:
        self._render_count += 1
        return self._render_count

    def set_segment_length(self, s: float) -> None:
        if s <= 0:
            raise InvalidArgumentError(f"Segment length must be positive, got {s}")
        self.segment_length = s

    def get_segment_length(self) -> float:
        return self.segment_length

    @contextmanager
    def motion(self) -> Iterator[None]:
        """Marks a motion as in flight for the duration of the block."""
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    @property
    def in_flight(self) -> int:
        return self._in_flight

    ## --- Turtle Registry ---
    def add_to_canvas(self, turtle) -> None:
        if self.on_canvas(turtle):
            return
        self._turtles.append(turtle)

    def on_canvas(self, turtle) -> bool:
        return any(t is turtle for t in self._turtles)

    def remove_from_canvas(self, turtle) -> None:
        self._turtles = [t for t in self._turtles if t is not turtle]

    def is_animating(self) -> bool:
        return len(self._turtles) > 0

    @property
    def turtles(self) -> List:
        return list(self._turtles)

    ## --- Surface Helpers ---
    @property
    def overlay(self) -> DrawingSurface:
        """Transparent layer above the surface holding the turtle icons."""
        if self._overlay is None:
            self._overlay = self.surface.create_overlay()
            self._apply_transform()
        return self._overlay

    def clear_overlay(self) -> DrawingSurface:
        overlay = self.overlay
        self._clear_layer(overlay)
        return overlay

    def clear(self) -> None:
        """Erases everything drawn on the surface and the icon layer."""
        for layer in self._layers():
            self._clear_layer(layer)

    def _clear_layer(self, layer: DrawingSurface) -> None:
        layer.save()
        layer.reset_transform()
        layer.clear_rect(0, 0, self.width, self.height)
        layer.restore()

    def bgcolor(self, color: Optional[str] = None) -> str:
        if color is not None:
            parse_color(color)
            self.surface.set_background(color)
        return self.surface.background

    def window_width(self) -> int:
        return self.width

    def window_height(self) -> int:
        return self.height

    def to_array(self, include_overlay: bool = True) -> np.ndarray:
        """
        Renders the device to an RGB image array.

        Raises:
            InvalidArgumentError: If the surface is not a raster (Cairo) surface
        """
        if not isinstance(self.surface, CairoSurface):
            raise InvalidArgumentError(f"Surface of device '{self.canvas_id}' cannot be rasterized")
        overlays = [self._overlay] if include_overlay and self._overlay is not None else []
        return self.surface.to_array(overlays=overlays)


class DeviceRegistry:
    """
    Explicit registry of canvas devices keyed by surface id.

    The registry is created by the composing application and injected into
    turtles and screens; there is no process-wide default. It also owns the
    configuration and the animator shared by every device it creates.

    Examples:
        >>> registry = DeviceRegistry(GraphicsConfig(surface="recording"))
        >>> device = registry.get_or_create("main")
        >>> registry.get("main") is device
        True
    """
    def __init__(self, config: Optional[GraphicsConfig] = None,
                 surface_factory: Optional[Callable[[str], DrawingSurface]] = None,
                 strategy: Optional[SchedulingStrategy] = None):
        self.config = config or GraphicsConfig()
        self._surface_factory = surface_factory or self._default_surface
        self.animator = Animator(strategy or ThrottledStrategy())
        self._devices: Dict[str, CanvasDevice] = {}

    def _default_surface(self, canvas_id: str) -> DrawingSurface:
        return make_surface(self.config.surface, self.config.width, self.config.height)

    def get_or_create(self, canvas_id: Optional[str] = None) -> CanvasDevice:
        canvas_id = canvas_id or self.config.canvas_id
        if canvas_id not in self._devices:
            surface = self._surface_factory(canvas_id)
            if surface is None:
                raise SurfaceUnavailableError(f"No drawing surface available for '{canvas_id}'")
            self._devices[canvas_id] = CanvasDevice(canvas_id, surface, self.config)
            logger.info("Created device '%s'", canvas_id)
        return self._devices[canvas_id]

    def get(self, canvas_id: str) -> CanvasDevice:
        try:
            return self._devices[canvas_id]
        except KeyError:
            raise SurfaceUnavailableError(f"Surface '{canvas_id}' is not registered") from None

    def destroy(self, canvas_id: str) -> CanvasDevice:
        device = self.get(canvas_id)
        del self._devices[canvas_id]
        logger.info("Destroyed device '%s'", canvas_id)
        return device

    def ids(self) -> List[str]:
        return list(self._devices)

    def __contains__(self, canvas_id: str) -> bool:
        return canvas_id in self._devices
