# turtlecanvas/errors.py
"""
Exception hierarchy shared by the geometry, device and turtle layers.

Geometry and state errors are raised before any turtle state is touched, so a
rejected operation leaves the turtle exactly as it was. A missing surface is
fatal to whatever drawing was attempted on it.
"""


class TurtleGraphicsError(Exception):
    """Base class for every error raised by turtlecanvas."""


class InvalidArgumentError(TurtleGraphicsError, ValueError):
    """Wrong arity or type passed to a geometry, color or command operation."""


class DegenerateGeometryError(TurtleGraphicsError, ArithmeticError):
    """An operation with no defined geometric result (e.g. division by zero length)."""


class SurfaceUnavailableError(TurtleGraphicsError, LookupError):
    """The requested drawing surface id is not registered."""


class AnimationInProgressError(TurtleGraphicsError, RuntimeError):
    """The device mapping was changed while a motion was still being drawn."""
