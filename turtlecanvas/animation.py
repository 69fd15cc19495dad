# turtlecanvas/animation.py
"""
Animation scheduler: turns continuous turtle motions into timed draw steps.

A straight motion is chopped into segments of the device's segment length and
an arc into equal angular pieces. The resulting AnimationSteps are executed in
order by an Animator, which asks an injected SchedulingStrategy before each
step whether to pay the device's delay. Suspension happens only between steps.
"""
from __future__ import annotations

import abc
import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional

from .errors import InvalidArgumentError
from .vector import Vector

if TYPE_CHECKING:
    from .device import CanvasDevice
    from .surface import DrawingSurface
    from .turtle import Turtle

logger = logging.getLogger(__name__)

ARC_EPSILON = 0.01  # degrees; smaller arc remainders are not drawn


## --- Step Representation ---
class StepKind(Enum):
    MOVE = "move"
    LINE = "line"
    ARC = "arc"


@dataclass(frozen=True)
class StrokeStyle:
    color: str = "black"
    width: float = 1.0


@dataclass(frozen=True)
class AnimationStep:
    """
    One discrete draw operation produced by decomposing a motion.

    MOVE and LINE steps carry start/end points (LINE also a stroke style);
    ARC steps carry a radius and an angular extent in degrees.
    """
    kind: StepKind
    start: Optional[Vector] = None
    end: Optional[Vector] = None
    style: Optional[StrokeStyle] = None
    radius: float = 0.0
    extent: float = 0.0

    @classmethod
    def line(cls, start: Vector, end: Vector, style: StrokeStyle) -> AnimationStep:
        return cls(StepKind.LINE, start=start, end=end, style=style)

    @classmethod
    def move(cls, start: Vector, end: Vector) -> AnimationStep:
        return cls(StepKind.MOVE, start=start, end=end)

    @classmethod
    def arc(cls, radius: float, extent: float) -> AnimationStep:
        return cls(StepKind.ARC, radius=radius, extent=extent)


## --- Motion Decomposition ---
def segment_line(start: Vector, end: Vector, segment_length: float, pen_down: bool,
                 style: Optional[StrokeStyle] = None) -> List[AnimationStep]:
    """
    Breaks a straight motion into steps of ``segment_length`` world units.

    Produces ``floor(|end - start| / segment_length)`` equal steps followed by
    one remainder step that lands exactly on ``end``; the remainder is omitted
    when the last generated point already coincides with ``end``.

    Args:
        start: Starting position
        end: Final position
        segment_length: Length of every step but the last
        pen_down: LINE steps when True, MOVE steps otherwise
        style: Stroke style carried by LINE steps

    Returns:
        List of AnimationSteps in execution order

    Raises:
        InvalidArgumentError: If segment_length is not positive

    Examples:
        >>> steps = segment_line(Vector(0, 0), Vector(25, 0), 10, True)
        >>> [s.end.x for s in steps]
        [10.0, 20.0, 25.0]
    """
    if segment_length <= 0:
        raise InvalidArgumentError(f"Segment length must be positive, got {segment_length}")
    start, end = Vector.of(start), Vector.of(end)
    style = style or StrokeStyle()
    delta = end.sub(start)
    head = delta.normalize()
    num_segs = math.floor(delta.length() / segment_length)

    def make(a: Vector, b: Vector) -> AnimationStep:
        return AnimationStep.line(a, b, style) if pen_down else AnimationStep.move(a, b)

    steps = []
    old_p = start
    for _ in range(num_segs):
        new_p = old_p.linear(1, segment_length, head)
        steps.append(make(old_p, new_p))
        old_p = new_p
    if not (old_p.x == end.x and old_p.y == end.y):
        steps.append(make(old_p, end))
    return steps


def segment_arc(radius: float, extent: float, segment_length: float) -> List[AnimationStep]:
    """
    Breaks an arc into ARC steps covering about ``segment_length`` of arc each.

    Arcs no longer than one segment become a single step. Longer arcs become
    ``floor(|extent| / |part|)`` steps of ``part`` degrees plus a remainder
    step when more than 0.01 degrees are left over.

    Examples:
        >>> [round(s.extent, 6) for s in segment_arc(10, 90, 10)]
        [57.29578, 32.70422]
    """
    if segment_length <= 0:
        raise InvalidArgumentError(f"Segment length must be positive, got {segment_length}")
    arc_len = abs(radius * math.pi * 2 * extent / 360)
    if arc_len <= segment_length:
        return [AnimationStep.arc(radius, extent)]

    extent_part = segment_length / arc_len * extent
    num_parts = math.floor(abs(extent) / abs(extent_part))
    steps = [AnimationStep.arc(radius, extent_part) for _ in range(num_parts)]
    extent_left = extent - num_parts * extent_part
    if abs(extent_left) > ARC_EPSILON:
        steps.append(AnimationStep.arc(radius, extent_left))
    return steps


def stroke_segment(surface: DrawingSurface, start: Vector, end: Vector,
                   style: StrokeStyle, filling: bool) -> None:
    """
    Strokes one line segment with round caps and joins.

    While a fill is open the segment extends the fill path instead of opening
    and closing a sub-path of its own.
    """
    if not filling:
        surface.begin_path()
        surface.move_to(start.x, start.y)
    surface.line_cap = "round"
    surface.line_join = "round"
    surface.line_width = style.width
    surface.stroke_style = style.color
    surface.line_to(end.x, end.y)
    surface.stroke()
    if not filling:
        surface.close_path()


def execute_step(turtle: Turtle, step: AnimationStep) -> None:
    """Runs a single step against the turtle's surface and updates its position."""
    surface = turtle.device.surface
    match step.kind:
        case StepKind.LINE:
            stroke_segment(surface, step.start, step.end, step.style, turtle.filling)
            turtle.position = Vector(step.end.x, step.end.y, 0.0)
        case StepKind.MOVE:
            surface.move_to(step.end.x, step.end.y)
            turtle.position = Vector(step.end.x, step.end.y, 0.0)
        case StepKind.ARC:
            turtle.arc(step.radius, step.extent)
        case _:
            raise InvalidArgumentError(f"Unknown animation step kind: {step.kind!r}")


## --- Scheduling ---
def step_delay(count: int, counter: int, delay: float) -> float:
    """
    Delay in milliseconds owed by a step given the throttle state.

    Only every ``counter``-th step pays the device delay; the others run
    immediately.
    """
    return delay if count >= counter else 0.0


class SchedulingStrategy(abc.ABC):
    """Decides, before every step, whether the animation yields and for how long."""

    @abc.abstractmethod
    async def before_step(self, device: CanvasDevice) -> None:
        raise NotImplementedError


class ImmediateStrategy(SchedulingStrategy):
    """Runs every step back to back without yielding (headless rendering)."""

    async def before_step(self, device: CanvasDevice) -> None:
        return None


class ThrottledStrategy(SchedulingStrategy):
    """
    Pays the device delay on every ``counter``-th step and runs the rest eagerly.

    Args:
        sleep: Coroutine function used to wait, ``asyncio.sleep`` by default
    """
    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._sleep = sleep

    async def before_step(self, device: CanvasDevice) -> None:
        count = device.increment_render_count()
        counter = device.get_counter()
        if count >= counter:
            device.reset_render_count()
            await self._sleep(step_delay(count, counter, device.get_delay()) / 1000.0)


class Animator:
    """
    Executes step queues for turtles using a scheduling strategy.

    Examples:
        >>> animator = Animator(ImmediateStrategy())
        >>> # await animator.run(turtle, segment_line(a, b, 10, True), new_position=b)
    """
    def __init__(self, strategy: SchedulingStrategy):
        self.strategy = strategy

    async def run(self, turtle: Turtle, steps: List[AnimationStep],
                  new_position: Optional[Vector] = None,
                  new_heading: Optional[Vector] = None) -> Vector:
        """
        Executes ``steps`` in order, then commits the requested final pose.

        The turtle icon is redrawn after every step while the turtle is
        visible, using the pose reached by that step.

        Returns:
            The turtle position once the motion has completed
        """
        device = turtle.device
        with device.motion():
            for step in steps:
                await self.strategy.before_step(device)
                execute_step(turtle, step)
                if turtle.visible:
                    turtle.draw_turtle_icon()
            if new_position is not None:
                turtle.position = new_position
            if new_heading is not None:
                turtle.heading = new_heading
        logger.debug("Completed %d step(s) on device '%s'", len(steps), device.canvas_id)
        return turtle.position
