"""
Diagnostic commands

Fixed command literals for checking the link and the board. None of
these decode the reply beyond the session's default handling.
"""

import logging

from .errors import ErrorCode
from .formatter import Command
from .session import CommandSession

logger = logging.getLogger(__name__)


class DiagnosticCommand:
    """Pre-encoded diagnostic command literals."""
    SOFT_CHECK = "T 0 0 0"     # Bus check, no reset
    HARD_CHECK = "T 1 0 0"     # Bus check with device-side reset
    PING = "T 2 0 0"           # Microcontroller only, no FPGA round trip
    RESTART = "T 3 0 0"        # Restart the board
    CAPABILITIES = "T 4 0 0"   # Read capability register


class Diagnostics:
    """Named diagnostic operations on a command session."""

    def __init__(self, session: CommandSession):
        self.session = session

    def _run(self, literal: str) -> ErrorCode:
        status = self.session.execute(Command.from_literal(literal)).status
        logger.info(f"Diagnostic '{literal}': {status.name}")
        return status

    def soft_check(self) -> ErrorCode:
        return self._run(DiagnosticCommand.SOFT_CHECK)

    def hard_check(self) -> ErrorCode:
        return self._run(DiagnosticCommand.HARD_CHECK)

    def ping(self) -> ErrorCode:
        return self._run(DiagnosticCommand.PING)

    def restart(self) -> ErrorCode:
        return self._run(DiagnosticCommand.RESTART)
