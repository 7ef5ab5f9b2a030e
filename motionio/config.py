"""
Link Configuration
==================

Settings for one serial link to the motion-control board.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_BAUD_RATE,
    LINE_TERMINATOR,
    LinePrefix,
    MAX_DEBUG_LINES,
    MAX_REPLY_TOKENS,
    READ_TIMEOUT_MS,
)


@dataclass
class LinkConfig:
    """
    Configuration for a motion I/O link.

    Attributes
    ----------
    port : str or None
        Serial port device path (e.g. '/dev/ttyUSB0', 'COM3')
    baudrate : int
        Serial baud rate
    read_timeout_ms : int
        Timeout for each individual line read (milliseconds)
    max_debug_lines : int
        Consecutive debug lines tolerated while waiting for a reply
    max_tokens : int
        Maximum number of tokens accepted in one reply
    terminator : str
        Line terminator appended to every command
    debug_prefix : str
        Prefix marking asynchronous debug lines
    """
    port: Optional[str] = None
    baudrate: int = DEFAULT_BAUD_RATE
    read_timeout_ms: int = READ_TIMEOUT_MS
    max_debug_lines: int = MAX_DEBUG_LINES
    max_tokens: int = MAX_REPLY_TOKENS
    terminator: str = LINE_TERMINATOR
    debug_prefix: str = LinePrefix.DEBUG

    def __post_init__(self):
        if self.baudrate <= 0:
            raise ValueError(f"baudrate must be positive, got {self.baudrate}")
        if self.read_timeout_ms <= 0:
            raise ValueError(f"read_timeout_ms must be positive, got {self.read_timeout_ms}")
        if self.max_debug_lines < 1:
            raise ValueError(f"max_debug_lines must be >= 1, got {self.max_debug_lines}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if not self.terminator:
            raise ValueError("terminator must not be empty")
        if not self.debug_prefix:
            raise ValueError("debug_prefix must not be empty")

    @property
    def read_timeout_s(self) -> float:
        return self.read_timeout_ms / 1000.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LinkConfig':
        """Build a config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
