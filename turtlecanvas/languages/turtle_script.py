# turtlecanvas/languages/turtle_script.py
"""
Turtle script interpreter: S-expression programs driving a Turtle and its Screen.

Every turtle and screen command is available under its usual turtle-graphics
name and short aliases; motion commands are awaited so a script draws its
shapes strictly in order.

The vocabulary includes:
- Special forms: do (sequence), repeat (loop)
- Motion: forward/fd, backward/bk/back, right/rt, left/lt, goto, setposition/setpos,
  setx, sety, setheading/seth, home, circle
- Pen & fill: penup/pu/up, pendown/pd/down, width/pensize, pencolor, fillcolor,
  color, begin_fill, end_fill, fill, dot, stamp, write
- State queries: heading, position/pos, xcor, ycor, towards, distance, isdown,
  isvisible
- Screen: bgcolor, setup, setworldcoordinates, window_width, window_height,
  turtles, exitonclick (returns the close handler for the host)
- Math: +, -, *, /, sin, cos, sqrt, pi

Example programs:
    "(repeat 4 (fd 100) (lt 90))"              # Square
    "(color red) (begin_fill) (circle 50) (end_fill)"  # Filled red disc
    "(setworldcoordinates -1 -1 1 1) (circle 0.5)"
"""
import logging
from typing import Optional, Union

from ..core import AstNode, Symbol, parse_program
from ..device import DeviceRegistry
from ..errors import InvalidArgumentError
from ..screen import Screen
from ..turtle import Turtle
from .base import BaseInterpreter

logger = logging.getLogger(__name__)


class TurtleScriptInterpreter(BaseInterpreter):
    """
    Interpreter for turtle scripts, bound to one turtle on one canvas.

    Bare symbols that name a primitive evaluate to its value; any other bare
    symbol is a plain string (colors, shape names, text). Parenthesized forms
    are always command calls.

    Example Usage:
        >>> registry = DeviceRegistry(GraphicsConfig(surface="recording"), strategy=ImmediateStrategy())
        >>> interpreter = TurtleScriptInterpreter(registry)
        >>> asyncio.run(interpreter.run("(repeat 3 (fd 50) (lt 120))"))
    """
    def __init__(self, registry: DeviceRegistry, canvas_id: Optional[str] = None,
                 turtle: Optional[Turtle] = None):
        super().__init__()
        self.registry = registry
        self.turtle = turtle or Turtle(registry, canvas_id)
        self.screen = Screen(registry, self.turtle.device.canvas_id)
        self._register_language_specific()

    def _register_language_specific(self):
        """Registers the turtle and screen commands with their arities and aliases."""
        t, s = self.turtle, self.screen
        reg = self.register

        # motion
        reg("forward", t.forward, 1, aliases=("fd",))
        reg("backward", t.backward, 1, aliases=("bk", "back"))
        reg("right", t.right, 1, aliases=("rt",))
        reg("left", t.left, 1, aliases=("lt",))
        reg("goto", t.goto, 2)
        reg("setposition", t.setposition, 2, aliases=("setpos",))
        reg("setx", t.setx, 1)
        reg("sety", t.sety, 1)
        reg("setheading", t.set_heading, 1, aliases=("seth",))
        reg("home", t.home, 0)
        reg("circle", t.circle, 1, 2)
        reg("dot", t.dot, 0, 2)
        reg("stamp", t.stamp, 0)
        reg("speed", t.speed, 1, 2)
        reg("delay", t.delay, 0, 1)
        reg("tracer", t.tracer, 1, 2)

        # state
        reg("heading", t.get_heading, 0)
        reg("position", t.get_position, 0, aliases=("pos",))
        reg("xcor", t.xcor, 0)
        reg("ycor", t.ycor, 0)
        reg("towards", t.towards, 2)
        reg("distance", t.distance, 2)

        # pen & fill
        reg("penup", t.pen_up, 0, aliases=("pu", "up"))
        reg("pendown", t.pen_down, 0, aliases=("pd", "down"))
        reg("width", t.set_pen_width, 1, aliases=("pensize",))
        reg("isdown", t.is_down, 0)
        reg("pencolor", t.set_pen_color, 1, 3)
        reg("fillcolor", t.set_fill_color, 1, 3)
        reg("color", t.color, 0, 3)
        reg("begin_fill", t.begin_fill, 0)
        reg("end_fill", t.end_fill, 0)
        reg("fill", t.fill, 0, 1)
        reg("write", t.write, 1, 2)
        reg("reset", t.reset, 0)
        reg("clear", t.clear, 0)

        # visibility
        reg("showturtle", t.show_turtle, 0, aliases=("st",))
        reg("hideturtle", t.hide_turtle, 0, aliases=("ht",))
        reg("isvisible", t.is_visible, 0)
        reg("shape", t.shape, 0, 1)

        # screen
        reg("setworldcoordinates", t.set_world_coordinates, 4)
        reg("bgcolor", s.bgcolor, 0, 1)
        reg("setup", s.setup, 2)
        reg("window_width", s.window_width, 0)
        reg("window_height", s.window_height, 0)
        reg("turtles", s.turtles, 0)
        reg("exitonclick", s.exit_on_click, 0)

    async def run(self, program: Union[AstNode, str]):
        """Evaluates a parsed program, or parses and evaluates a program string."""
        if isinstance(program, str):
            program = parse_program(program)
        return await self.evaluate(program)

    async def evaluate(self, node):
        """
        Evaluates a node, awaiting any motion it starts.

        Args:
            node: AstNode, Symbol or literal

        Returns:
            The command's result, the literal itself, or for ``do`` and
            ``repeat`` the value of the last form evaluated

        Raises:
            InvalidArgumentError: For unknown commands, wrong arity or invalid
                arguments
        """
        if isinstance(node, Symbol):
            return self.primitives.get(node, str(node))
        if not isinstance(node, AstNode):
            return node

        if node.name == "do":
            result = None
            for arg in node.args:
                result = await self.evaluate(arg)
            return result
        if node.name == "repeat":
            if not node.args:
                raise InvalidArgumentError("repeat() takes a count and at least one form (0 given)")
            count = await self.evaluate(node.args[0])
            if isinstance(count, bool) or not isinstance(count, (int, float)):
                raise InvalidArgumentError(f"repeat() count must be a number, got {count!r}")
            result = None
            for _ in range(int(count)):
                for arg in node.args[1:]:
                    result = await self.evaluate(arg)
            return result

        evaluated_args = [await self.evaluate(arg) for arg in node.args]
        logger.debug("%s %s", node.name, evaluated_args)
        return await self.call(node.name, evaluated_args)
