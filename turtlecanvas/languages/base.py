# turtlecanvas/languages/base.py
"""
Base interpreter class providing the common interface for script languages.

This module defines the abstract base class every script interpreter inherits
from. It provides shared arithmetic, constants and the arity check applied to
every command call, while each language implements its own evaluation.
"""
import abc
import inspect
import math
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

from ..core import AstNode
from ..errors import InvalidArgumentError


@dataclass(frozen=True)
class Command:
    """
    A callable exposed to scripts together with its accepted argument counts.

    Attributes:
        name: Canonical name used in error messages
        func: The implementation; may return an awaitable
        min_args: Fewest positional arguments accepted
        max_args: Most positional arguments accepted
    """
    name: str
    func: Callable
    min_args: int
    max_args: int

    def check_args(self, given: int) -> None:
        """
        Raises:
            InvalidArgumentError: If ``given`` is outside the accepted range

        Examples:
            >>> Command("forward", print, 1, 1).check_args(2)
            Traceback (most recent call last):
            ...
            InvalidArgumentError: forward() takes exactly 1 positional argument(s) (2 given)
        """
        if self.min_args <= given <= self.max_args:
            return
        if self.min_args == self.max_args:
            expected = f"exactly {self.min_args}"
        else:
            expected = f"from {self.min_args} to {self.max_args}"
        raise InvalidArgumentError(
            f"{self.name}() takes {expected} positional argument(s) ({given} given)")


class BaseInterpreter(abc.ABC):
    """
    Abstract base class for script interpreters.

    Each interpreter maintains dictionaries of primitives (named constants) and
    implementations (commands) that define the language's vocabulary.

    Attributes:
        primitives (dict): Constants available in the language
        implementations (dict): Commands keyed by every name they answer to

    Examples:
        >>> class Calculator(BaseInterpreter):
        ...     async def evaluate(self, node):
        ...         return await self.call(node.name, [a for a in node.args])
    """
    def __init__(self):
        self.primitives: Dict[str, Any] = {}
        self.implementations: Dict[str, Command] = {}
        self._register_shared()

    def _register_shared(self):
        """
        Registers arithmetic and constants shared across all languages.

        Registered primitives:
            - pi: Mathematical constant π

        Registered implementations:
            - +, -, *, /: Basic arithmetic operations
            - sin, cos, sqrt: Math functions (radians)
        """
        self.primitives["pi"] = math.pi

        for name, func in {"/": operator.truediv, "*": operator.mul,
                           "-": operator.sub, "+": operator.add}.items():
            self.register(name, func, 2)
        for name, func in {"sin": math.sin, "cos": math.cos, "sqrt": math.sqrt}.items():
            self.register(name, func, 1)

    def register(self, name: str, func: Callable, min_args: int, max_args: Optional[int] = None,
                 aliases: Sequence[str] = ()) -> Command:
        """Adds a command under ``name`` and each alias."""
        command = Command(name, func, min_args, min_args if max_args is None else max_args)
        for key in (name, *aliases):
            self.implementations[key] = command
        return command

    async def call(self, name: str, args: list):
        """
        Invokes a registered command after checking its arity.

        Raises:
            InvalidArgumentError: If the command is unknown or the arity is wrong
        """
        if name not in self.implementations:
            raise InvalidArgumentError(f"Unknown command: {name}")
        command = self.implementations[name]
        command.check_args(len(args))
        result = command.func(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    @abc.abstractmethod
    async def evaluate(self, node: AstNode):
        """
        Evaluates an AST node, running its commands for their effects.

        Args:
            node: The root AstNode of the program to evaluate

        Returns:
            The value of the last evaluated form

        Raises:
            NotImplementedError: This is an abstract method that must be overridden
        """
        raise NotImplementedError
