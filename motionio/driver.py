"""
Motion I/O Driver
=================

High-level interface to the FPGA/uP motion-control board.

Example:
    >>> from motionio import MotionIO, ErrorCode
    >>>
    >>> # Using context manager
    >>> with MotionIO('/dev/ttyUSB0') as board:
    ...     status, amap = board.discover_capabilities()
    ...     status, value = board.execute('r', 1, 0, 0)
    >>>
    >>> # Manual connection
    >>> board = MotionIO()
    >>> if board.init('/dev/ttyUSB0', 256000) == ErrorCode.NO_ERROR:
    ...     board.ping()
    ...     board.close()
"""

import logging
import threading
from typing import Callable, Optional, Tuple

from .capabilities import AddressMap, CapabilityMap
from .config import LinkConfig
from .constants import DEFAULT_BAUD_RATE, result_index_for
from .diagnostics import Diagnostics
from .errors import ErrorCode
from .formatter import Command
from .session import CommandSession
from .transport import SerialTransport, Transport

logger = logging.getLogger(__name__)


class MotionIO:
    """
    Motion-control board driver.

    Owns one transport handle for its lifetime:
    ``init`` -> any number of commands -> ``close``.
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = DEFAULT_BAUD_RATE,
        config: Optional[LinkConfig] = None,
        transport: Optional[Transport] = None,
        on_debug_line: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize driver.

        Args:
            port: Serial port path, used by the context manager
            baudrate: Serial baud rate
            config: Link configuration. Overrides port/baudrate if given.
            transport: Transport to use (default: pyserial SerialTransport)
            on_debug_line: Optional callback for discarded debug lines
        """
        self.config = config or LinkConfig(port=port, baudrate=baudrate)
        self.transport = transport or SerialTransport(self.config.terminator)
        self.session = CommandSession(self.transport, self.config, on_debug_line)
        self.capabilities = CapabilityMap(self.session)
        self.diagnostics = Diagnostics(self.session)

    def __enter__(self) -> 'MotionIO':
        status = self.init(self.config.port, self.config.baudrate)
        if status is not ErrorCode.NO_ERROR:
            raise ConnectionError(f"Cannot open {self.config.port}: {status.name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Connection Management
    # =========================================================================

    def init(self, port: Optional[str], baud: int = DEFAULT_BAUD_RATE) -> ErrorCode:
        """
        Open the serial link.

        Returns:
            NO_ERROR, PORT_NAME_INVALID (empty port, transport untouched)
            or OPEN_FAILED
        """
        if not port:
            logger.warning("No port name given")
            return ErrorCode.PORT_NAME_INVALID

        with self.session.lock:
            status = self.transport.open(port, baud)
        if status is ErrorCode.NO_ERROR:
            self.config.port = port
            self.config.baudrate = baud
            # A newly opened link may lead to a different board
            self.capabilities.reset()
        return status

    def close(self) -> ErrorCode:
        """
        Close the serial link.

        Waits for any exchange in flight. CLOSE_FAILED is best-effort information.
        """
        with self.session.lock:
            status = self.transport.close()
        if status is not ErrorCode.NO_ERROR:
            logger.warning(f"Close failed: {status.name}")
        return status

    @property
    def is_connected(self) -> bool:
        return self.transport.is_open

    # =========================================================================
    # Commands
    # =========================================================================

    def execute(
        self,
        command_letter: str,
        port: int,
        register: int,
        data: int,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[ErrorCode, Optional[int]]:
        """
        Execute a general register command.

        Sends "<letter> <port> <register> <data>" and returns the reply
        token designated for the command family as the integer result.

        Returns:
            (status, result). result is None unless status is NO_ERROR.
        """
        if not self.is_connected:
            return ErrorCode.NOT_CONNECTED, None

        command = Command.of(command_letter, port, register, data)
        result = self.session.execute(command, result_index_for(command_letter), cancel)
        return result.status, result.result

    # =========================================================================
    # Capabilities
    # =========================================================================

    def discover_capabilities(self) -> Tuple[ErrorCode, Optional[AddressMap]]:
        """Query the board's capability word and rebuild the address map."""
        if not self.is_connected:
            return ErrorCode.NOT_CONNECTED, None
        return self.capabilities.discover()

    @property
    def address_map(self) -> Optional[AddressMap]:
        """Current address map, or None before a successful discovery."""
        return self.capabilities.get_address_map()[1]

    def sys_register(self, offset: int = 0) -> Tuple[ErrorCode, Optional[int]]:
        return self.capabilities.sys_register(offset)

    def pwm_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self.capabilities.pwm_register(unit, offset)

    def qe_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self.capabilities.qe_register(unit, offset)

    def rc_register(self, unit: int, offset: int) -> Tuple[ErrorCode, Optional[int]]:
        return self.capabilities.rc_register(unit, offset)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _diagnostic(self, run: Callable[[], ErrorCode]) -> ErrorCode:
        if not self.is_connected:
            return ErrorCode.NOT_CONNECTED
        return run()

    def soft_check(self) -> ErrorCode:
        return self._diagnostic(self.diagnostics.soft_check)

    def hard_check(self) -> ErrorCode:
        return self._diagnostic(self.diagnostics.hard_check)

    def ping(self) -> ErrorCode:
        return self._diagnostic(self.diagnostics.ping)

    def restart(self) -> ErrorCode:
        return self._diagnostic(self.diagnostics.restart)
