"""
MotionIO - FPGA/uP Motion-Control Board Driver
==============================================

A Python library for talking to an FPGA/microcontroller motion-control
board over its line-based serial command protocol.

Example:
    >>> from motionio import MotionIO
    >>>
    >>> with MotionIO('/dev/ttyUSB0') as board:
    ...     board.ping()
    ...     status, amap = board.discover_capabilities()
"""

from .driver import MotionIO
from .errors import ErrorCode
from .config import LinkConfig
from .transport import Transport, SerialTransport
from .formatter import Command, format_command
from .parser import ParameterParser, ParsedToken, ParseOutcome, TokenKind
from .reader import ReplyReader, ReadOutcome
from .session import CommandSession, SessionResult, SessionState
from .capabilities import AddressMap, CapabilityMap
from .diagnostics import DiagnosticCommand, Diagnostics
from .constants import (
    CommandLetter,
    LinePrefix,
    DEFAULT_BAUD_RATE,
    READ_TIMEOUT_MS,
    MAX_REPLY_TOKENS,
    MAX_DEBUG_LINES,
)

__version__ = "1.0.0"
__all__ = [
    "MotionIO",
    "ErrorCode",
    "LinkConfig",
    "Transport",
    "SerialTransport",
    "Command",
    "format_command",
    "ParameterParser",
    "ParsedToken",
    "ParseOutcome",
    "TokenKind",
    "ReplyReader",
    "ReadOutcome",
    "CommandSession",
    "SessionResult",
    "SessionState",
    "AddressMap",
    "CapabilityMap",
    "DiagnosticCommand",
    "Diagnostics",
    "CommandLetter",
    "LinePrefix",
    "DEFAULT_BAUD_RATE",
    "READ_TIMEOUT_MS",
    "MAX_REPLY_TOKENS",
    "MAX_DEBUG_LINES",
]
