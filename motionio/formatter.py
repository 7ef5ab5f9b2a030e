"""
Command line formatting.

A command is a single printable letter followed by space separated
arguments and the line terminator, e.g. ``"r 1 3 0\\n"``.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

from .constants import LINE_TERMINATOR
from .tools import log_exceptions

Argument = Union[int, str]


def _check_identifier(identifier: str) -> None:
    if not isinstance(identifier, str) or len(identifier) != 1:
        raise ValueError(f"Command identifier must be a single character, got {identifier!r}")
    if not identifier.isascii() or not identifier.isprintable() or identifier.isspace():
        raise ValueError(f"Command identifier must be printable ASCII, got {identifier!r}")


def _check_argument(arg: Argument, terminator: str) -> str:
    # bool is an int subclass but never a valid wire argument
    if isinstance(arg, bool):
        raise ValueError(f"Boolean argument not allowed: {arg!r}")
    if isinstance(arg, int):
        return str(arg)
    if isinstance(arg, str):
        if not arg:
            raise ValueError("Empty string argument not allowed")
        if any(ch.isspace() for ch in arg) or any(ch in arg for ch in terminator):
            raise ValueError(f"Argument contains whitespace or terminator: {arg!r}")
        return arg
    raise ValueError(f"Unsupported argument type {type(arg).__name__}: {arg!r}")


@log_exceptions
def format_command(identifier: str, *args: Argument, terminator: str = LINE_TERMINATOR) -> str:
    """
    Build a command line.

    Args:
        identifier: Command letter (single printable character)
        *args: Integer or whitespace-free string arguments
        terminator: Line terminator to append

    Returns:
        "<identifier> <arg1> ... <argN><terminator>"

    Raises:
        ValueError: If the identifier or an argument breaks the line format
    """
    _check_identifier(identifier)
    parts = [identifier] + [_check_argument(a, terminator) for a in args]
    return " ".join(parts) + terminator


@dataclass(frozen=True)
class Command:
    """
    A command to send to the board.

    Attributes:
        identifier: Command letter
        arguments: Ordered arguments
    """
    identifier: str
    arguments: Tuple[Argument, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, identifier: str, *args: Argument) -> 'Command':
        return cls(identifier, tuple(args))

    @classmethod
    def from_literal(cls, literal: str) -> 'Command':
        """Build a command from a fixed literal such as ``"T 2 0 0"``."""
        letter, *rest = literal.split()
        return cls(letter, tuple(int(a) if a.lstrip('+-').isdigit() else a for a in rest))

    def to_line(self, terminator: str = LINE_TERMINATOR) -> str:
        return format_command(self.identifier, *self.arguments, terminator=terminator)

    def __str__(self) -> str:
        return " ".join([self.identifier] + [str(a) for a in self.arguments])
