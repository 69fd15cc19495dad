import asyncio
import math
import re

import pytest

from turtlecanvas.core import AstNode, Symbol, parse_program, tokenize
from turtlecanvas.errors import InvalidArgumentError
from turtlecanvas.languages.base import Command
from turtlecanvas.languages.turtle_script import TurtleScriptInterpreter


@pytest.fixture
def interpreter(registry):
    return TurtleScriptInterpreter(registry)


def run(interpreter, program):
    return asyncio.run(interpreter.run(program))


## --- Parser ---
def test_parse_single_form():
    assert parse_program("(fd 100)") == AstNode("fd", [100])


def test_parse_wraps_several_forms_in_do():
    assert parse_program("(fd 1.5) (lt 90)") == AstNode("do", [AstNode("fd", [1.5]), AstNode("lt", [90])])


def test_parse_symbols_and_strings():
    ast = parse_program('(write "hi there") (color red)')
    assert ast.args[0].args == ["hi there"]
    assert isinstance(ast.args[1].args[0], Symbol)


def test_tokenize_keeps_quoted_text_together():
    assert tokenize('(write "a (b)")') == ["(", "write", '"a (b)"', ")"]


@pytest.mark.parametrize("program", ["", "(fd 10", "fd 10", "(fd 10))", "()", "((fd) 1)"])
def test_parse_errors(program):
    with pytest.raises(ValueError):
        parse_program(program)


## --- Evaluation ---
def test_square_returns_home(interpreter):
    run(interpreter, "(repeat 4 (fd 100) (lt 90))")
    assert interpreter.turtle.get_position() == pytest.approx((0.0, 0.0), abs=1e-9)
    assert len(interpreter.turtle.device.surface.find("line_to")) == 4


def test_arithmetic_and_primitives(interpreter):
    assert run(interpreter, "(* 2 pi)") == pytest.approx(2 * math.pi)
    run(interpreter, "(fd (+ 10 (* 2 20)))")
    assert interpreter.turtle.xcor() == 50


def test_aliases_share_the_command(interpreter):
    run(interpreter, "(pu) (bk 10) (pd) (rt 90) (back 5)")
    assert interpreter.turtle.get_position() == pytest.approx((-10.0, 5.0))
    assert interpreter.turtle.is_down()


def test_symbols_become_strings(interpreter):
    run(interpreter, "(color red) (shape turtle) (shape circle)")
    assert interpreter.turtle.color() == ("red", "red")
    assert interpreter.turtle.shape() == "circle"


def test_pencolor_from_channels(interpreter):
    assert run(interpreter, "(pencolor 255 0 0)") == "#ff0000"


def test_queries_return_values(interpreter):
    assert run(interpreter, "(setpos 3 4) (distance 0 0)") == pytest.approx(5)
    assert run(interpreter, "(towards 3 10)") == pytest.approx(90)
    assert run(interpreter, "(isdown)") is True


def test_screen_commands(interpreter):
    run(interpreter, "(setup 300 200) (bgcolor black)")
    assert run(interpreter, "(window_width)") == 300
    assert interpreter.screen.bgcolor() == "black"


def test_turtles_lists_the_canvas_turtles(interpreter):
    assert run(interpreter, "(turtles)") == [interpreter.turtle]


def test_exitonclick_returns_the_close_handler(interpreter, registry):
    close = run(interpreter, "(exitonclick)")
    assert close() is False
    assert interpreter.screen.canvas_id in registry

    interpreter.screen.device.remove_from_canvas(interpreter.turtle)
    assert close() is True
    assert interpreter.screen.canvas_id not in registry


def test_fill_script(interpreter):
    run(interpreter, "(fillcolor blue) (begin_fill) (circle 20) (end_fill)")
    surface = interpreter.turtle.device.surface
    assert surface.find("fill") == [("blue",)]


def test_arity_errors_name_the_canonical_command(interpreter):
    message = "forward() takes exactly 1 positional argument(s) (2 given)"
    with pytest.raises(InvalidArgumentError, match=re.escape(message)):
        run(interpreter, "(fd 1 2)")
    with pytest.raises(InvalidArgumentError, match=re.escape("(0 given)")):
        run(interpreter, "(circle)")
    with pytest.raises(InvalidArgumentError, match="from 0 to 2"):
        run(interpreter, "(dot 1 2 3)")


def test_unknown_command(interpreter):
    with pytest.raises(InvalidArgumentError, match="Unknown command: spin"):
        run(interpreter, "(spin 3)")


def test_repeat_needs_a_numeric_count(interpreter):
    with pytest.raises(InvalidArgumentError):
        run(interpreter, "(repeat)")
    with pytest.raises(InvalidArgumentError):
        run(interpreter, "(repeat many (fd 1))")


def test_command_check_args_range():
    command = Command("pencolor", print, 1, 3)
    command.check_args(3)
    with pytest.raises(InvalidArgumentError, match=re.escape("pencolor() takes from 1 to 3 positional argument(s) (4 given)")):
        command.check_args(4)
