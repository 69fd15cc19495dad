# turtlecanvas/screen.py
"""
Screen: device-level commands that are not tied to a single turtle.
"""
import logging
from typing import Callable, List, Optional

from .device import CanvasDevice, DeviceRegistry

logger = logging.getLogger(__name__)


class Screen:
    """
    Facade over the canvas device a group of turtles draws on.

    Examples:
        >>> registry = DeviceRegistry(GraphicsConfig(surface="recording"))
        >>> screen = Screen(registry)
        >>> screen.setup(640, 480)
        >>> screen.window_width()
        640
    """
    def __init__(self, registry: DeviceRegistry, canvas_id: Optional[str] = None):
        self.registry = registry
        self.canvas_id = canvas_id or registry.config.canvas_id
        self.device: CanvasDevice = registry.get_or_create(self.canvas_id)

    def bgcolor(self, color: Optional[str] = None) -> str:
        return self.device.bgcolor(color)

    def setup(self, width: int, height: int) -> None:
        self.device.setup(width, height)

    def window_width(self) -> int:
        return self.device.window_width()

    def window_height(self) -> int:
        return self.device.window_height()

    def turtles(self) -> List:
        return self.device.turtles

    def tracer(self, n: Optional[int], delay: Optional[float] = None) -> None:
        """Renders only every ``n``-th animation step; 0 turns animation off for every turtle."""
        self.device.set_counter(n)
        if n == 0:
            for turtle in self.device.turtles:
                turtle.animate = False
            self.device.reset_render_count()
        if delay is not None:
            self.device.set_delay(delay)

    def delay(self, d: Optional[float] = None) -> float:
        if d is not None:
            self.device.set_delay(abs(d))
        return self.device.get_delay()

    def set_world_coordinates(self, llx: float, lly: float, urx: float, ury: float) -> None:
        self.device.set_world_coordinates(llx, lly, urx, ury)

    def clear(self) -> None:
        self.device.clear()

    def exit_on_click(self) -> Callable[[], bool]:
        """
        Builds the handler a host calls when the user clicks to close the canvas.

        The handler destroys the device only once no turtle is registered on it
        any more, so a drawing is never torn down mid-animation.

        Returns:
            A callable returning True when the device was destroyed
        """
        def handler() -> bool:
            if self.canvas_id not in self.registry:
                return True
            if self.device.is_animating():
                logger.debug("Ignoring close request on '%s': turtles still registered", self.canvas_id)
                return False
            self.registry.destroy(self.canvas_id)
            return True
        return handler
