# turtlecanvas/core.py
"""
Core functionality for turtle scripts.

This module provides the pieces shared by every script front end:
- AST node representation for parsed programs
- S-expression parser for converting program text to an AST
- Image export utilities

A turtle script is a sequence of S-expressions such as
``(repeat 4 (fd 50) (lt 90))``; several top-level forms are run in order.
"""
import os
import re
from typing import List, Union

import imageio
import numpy as np


## --- Core Constants ---
OUTPUT_DIR = "output"  # Root for batch inputs and rendered images
_TOKEN_RE = re.compile(r'"[^"]*"|\(|\)|[^\s()"]+')


## --- AST Representation ---
class AstNode:
    """
    A node in the Abstract Syntax Tree representing a script element.

    Each AstNode is a parenthesized command call; bare identifiers parse to
    Symbol instead.

    Attributes:
        name (str): The command name or symbol
        args (list): List of arguments (AstNodes, strings, floats, or ints)

    Examples:
        >>> AstNode('fd', [100])
        >>> AstNode('repeat', [4, AstNode('fd', [50]), AstNode('lt', [90])])
    """
    def __init__(self, name: str, args: list):
        self.name = name
        self.args = args

    def __repr__(self):
        return f"AstNode('{self.name}', {self.args})"

    def __eq__(self, other):
        return isinstance(other, AstNode) and self.name == other.name and self.args == other.args


class Symbol(str):
    """A bare identifier such as a color, a shape name or `pi`."""
    def __repr__(self):
        return f"Symbol('{str(self)}')"


def _atom(token: str) -> Union[int, float, str, Symbol]:
    """
    Converts a string token into an appropriate data type.

    Quoted tokens become strings; otherwise the token is tried as an integer,
    then as a float, and finally kept as a Symbol.

    Examples:
        >>> _atom("42")
        42
        >>> _atom('"hello world"')
        'hello world'
        >>> _atom("red")
        Symbol('red')
    """
    if token.startswith('"'):
        return token[1:-1]
    try:
        return int(token)
    except ValueError:
        try:
            return float(token)
        except ValueError:
            return Symbol(token)


def tokenize(program_string: str) -> List[str]:
    """
    Splits a program into parentheses, quoted strings and bare tokens.

    Examples:
        >>> tokenize('(write "hi there")')
        ['(', 'write', '"hi there"', ')']
    """
    return _TOKEN_RE.findall(program_string)


## --- S-Expression Parser ---
def _parse_recursive(tokens: List[str]) -> Union[AstNode, float, int, str, Symbol]:
    """
    Recursively parses tokens into an AST (recursive descent over S-expressions).

    Args:
        tokens: List of string tokens to parse (consumed in-place)

    Raises:
        ValueError: If parentheses are unmatched or a form has no command name
    """
    if not tokens:
        raise ValueError("Unexpected end of program while parsing.")

    token = tokens.pop(0)
    if token == '(':
        if not tokens or tokens[0] in ('(', ')'):
            raise ValueError("Expected a command name after '('.")
        name = tokens.pop(0)
        args = []
        while tokens and tokens[0] != ')':
            args.append(_parse_recursive(tokens))
        if not tokens:
            raise ValueError("Missing ')' in program.")
        tokens.pop(0)
        return AstNode(name, args)

    elif token == ')':
        raise ValueError("Unexpected ')' found during parsing.")
    else:
        return _atom(token)


def parse_program(program_string: str) -> AstNode:
    """
    Parses a complete turtle script into an AST.

    Several top-level forms are wrapped in a single ``do`` node so they are
    evaluated in order.

    Args:
        program_string: The script as S-expression text

    Returns:
        AstNode representing the root of the parsed program

    Raises:
        ValueError: If the program has syntax errors or contains a bare literal
            at the top level

    Examples:
        >>> parse_program("(fd 100)")
        AstNode('fd', [100])
        >>> parse_program("(fd 100) (lt 90)")
        AstNode('do', [AstNode('fd', [100]), AstNode('lt', [90])])
    """
    tokens = tokenize(program_string)
    if not tokens:
        raise ValueError("Program is empty.")
    forms = []
    while tokens:
        if tokens[0] != '(':
            raise ValueError(f"Program must be made of expressions, found literal '{tokens[0]}'.")
        forms.append(_parse_recursive(tokens))
    return forms[0] if len(forms) == 1 else AstNode("do", forms)


def export_image(image_array: np.ndarray, export_path: str):
    """
    Exports a rendered image array to a PNG file.

    Creates the output directory if it doesn't exist.

    Args:
        image_array: RGB image as numpy array with values in [0,1] range
        export_path: File path where the PNG should be saved

    Examples:
        >>> export_image(np.ones((400, 400, 3)), "output/blank.png")
    """
    output_dir = os.path.dirname(export_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    imageio.imwrite(export_path, (np.clip(image_array, 0, 1) * 255).astype(np.uint8))
