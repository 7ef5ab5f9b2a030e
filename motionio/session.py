"""
Command session

One session call is one complete exchange with the board:
format -> write -> read (filtering debug lines) -> parse.

Example:
    >>> session = CommandSession(transport)
    >>> result = session.execute(Command.of('r', 1, 3, 0))
    >>> if result.ok:
    ...     print(result.result, [t.raw for t in result.tokens])
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, List, Optional

from .config import LinkConfig
from .constants import result_index_for
from .errors import ErrorCode
from .formatter import Command, format_command
from .parser import ParameterParser, ParsedToken
from .reader import ReplyReader
from .transport import Transport

logger = logging.getLogger(__name__)


class SessionState(IntEnum):
    """States of a single session call"""
    IDLE = 0
    SENDING = 1
    AWAITING_REPLY = 2
    FILTERING_DEBUG_LINES = 3
    PARSING = 4
    DONE = 5
    FAILED = 6


@dataclass
class SessionResult:
    """
    Outcome of one session call.

    Attributes:
        status: NO_ERROR or the failing step's error code
        result: Designated integer result, if one was requested
        tokens: Parsed reply tokens (empty on failure)
        debug_lines: Number of debug lines discarded while waiting
        reply: Raw reply line, if one was read
    """
    status: ErrorCode
    result: Optional[int] = None
    tokens: List[ParsedToken] = field(default_factory=list)
    debug_lines: int = 0
    reply: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ErrorCode.NO_ERROR


class CommandSession:
    """
    Serialized command/reply exchanges over one transport.

    The whole of ``execute`` runs under a lock, so concurrent callers
    never interleave their writes and reads on the link.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[LinkConfig] = None,
        on_debug_line: Optional[Callable[[str], None]] = None,
    ):
        self.transport = transport
        self.config = config or LinkConfig()
        self.reader = ReplyReader(
            transport,
            timeout_ms=self.config.read_timeout_ms,
            max_debug_lines=self.config.max_debug_lines,
            debug_prefix=self.config.debug_prefix,
            on_debug_line=on_debug_line,
        )
        self.parser = ParameterParser(self.config.max_tokens)
        self.state = SessionState.IDLE
        self.lock = threading.Lock()

    def _enter(self, state: SessionState) -> None:
        logger.debug(f"{self.state.name} -> {state.name}")
        self.state = state

    def _fail(self, command: Command, status: ErrorCode, **kwargs) -> SessionResult:
        self._enter(SessionState.FAILED)
        logger.warning(f"Command '{command}' failed: {status.name}")
        return SessionResult(status, **kwargs)

    def execute(
        self,
        command: Command,
        result_index: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SessionResult:
        """
        Send a command and read its reply.

        Args:
            command: Command to send
            result_index: Reply token to expose as the integer result.
                None means no scalar result is expected.
            cancel: Optional event that aborts the call between reads

        Returns:
            SessionResult. On failure tokens are empty and result is None.
        """
        line = format_command(command.identifier, *command.arguments,
                              terminator=self.config.terminator)

        with self.lock:
            self.state = SessionState.IDLE
            self._enter(SessionState.SENDING)
            status = self.transport.write_line(line)
            if status is not ErrorCode.NO_ERROR:
                return self._fail(command, status)

            self._enter(SessionState.AWAITING_REPLY)
            read = self.reader.read_reply(cancel)
            if read.debug_lines:
                self._enter(SessionState.FILTERING_DEBUG_LINES)
            if read.status is not ErrorCode.NO_ERROR:
                return self._fail(command, read.status, debug_lines=read.debug_lines)

            self._enter(SessionState.PARSING)
            status, tokens = self.parser.parse(read.line)
            if status is not ErrorCode.NO_ERROR:
                return self._fail(command, status, debug_lines=read.debug_lines,
                                  reply=read.line)

            result = None
            if result_index is not None:
                if result_index >= len(tokens) or not tokens[result_index].is_integer:
                    logger.warning(
                        f"Reply {read.line!r} has no integer token at index {result_index}"
                    )
                    return self._fail(command, ErrorCode.MALFORMED_REPLY,
                                      debug_lines=read.debug_lines, reply=read.line)
                result = tokens[result_index].value

            self._enter(SessionState.DONE)
            return SessionResult(ErrorCode.NO_ERROR, result, tokens,
                                 read.debug_lines, read.line)

    def query(self, command: Command, cancel: Optional[threading.Event] = None) -> SessionResult:
        """Execute a command expecting the scalar result of its command family."""
        return self.execute(command, result_index_for(command.identifier), cancel)
