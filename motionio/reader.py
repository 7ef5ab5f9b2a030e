"""
Reply reader

Reads lines from the transport until a genuine reply arrives. The board
interleaves asynchronous ``D:`` debug lines with its replies; these are
discarded here and never reach the parser.
"""

import logging
import threading
from typing import Callable, NamedTuple, Optional

from .constants import LinePrefix, MAX_DEBUG_LINES, READ_TIMEOUT_MS
from .errors import ErrorCode
from .transport import Transport

logger = logging.getLogger(__name__)


class ReadOutcome(NamedTuple):
    status: ErrorCode
    line: Optional[str]
    debug_lines: int


class ReplyReader:
    """
    Debug-filtering line reader.

    Each read is bounded by ``timeout_ms``. At most ``max_debug_lines``
    consecutive debug lines are read, so a call never takes longer than
    ``max_debug_lines * timeout_ms``.
    """

    def __init__(
        self,
        transport: Transport,
        timeout_ms: int = READ_TIMEOUT_MS,
        max_debug_lines: int = MAX_DEBUG_LINES,
        debug_prefix: str = LinePrefix.DEBUG,
        on_debug_line: Optional[Callable[[str], None]] = None,
    ):
        self.transport = transport
        self.timeout_ms = timeout_ms
        self.max_debug_lines = max_debug_lines
        self.debug_prefix = debug_prefix
        self.on_debug_line = on_debug_line

    def is_debug_line(self, line: str) -> bool:
        return line.startswith(self.debug_prefix)

    def read_reply(self, cancel: Optional[threading.Event] = None) -> ReadOutcome:
        """
        Read the next non-debug line.

        Args:
            cancel: Optional event checked before every read

        Returns:
            ReadOutcome with the reply line on NO_ERROR. On failure the
            status is READ_TIMED_OUT, READ_FAILED, TOO_MANY_DEBUG_LINES
            or CANCELLED and the line is None.
        """
        discarded = 0
        while True:
            if cancel is not None and cancel.is_set():
                logger.info(f"Reply read cancelled after {discarded} debug lines")
                return ReadOutcome(ErrorCode.CANCELLED, None, discarded)

            status, line = self.transport.read_line(self.timeout_ms)
            if status is not ErrorCode.NO_ERROR:
                logger.warning(f"Reply read failed: {status.name}")
                return ReadOutcome(status, None, discarded)

            if not self.is_debug_line(line):
                return ReadOutcome(ErrorCode.NO_ERROR, line, discarded)

            discarded += 1
            logger.debug(f"Discarded debug line: {line!r}")
            if self.on_debug_line:
                self.on_debug_line(line)

            if discarded >= self.max_debug_lines:
                logger.warning(f"Gave up after {discarded} consecutive debug lines")
                return ReadOutcome(ErrorCode.TOO_MANY_DEBUG_LINES, None, discarded)
