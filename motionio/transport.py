"""
Serial transport for the motion-control link

The protocol core only needs four operations from the link: open, close,
write one line and read one line with a timeout. ``Transport`` captures
that capability; ``SerialTransport`` provides it on top of pyserial.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import serial

from .constants import DEFAULT_BAUD_RATE, LINE_TERMINATOR
from .errors import ErrorCode

logger = logging.getLogger(__name__)


class Transport(ABC):
    """
    Abstract duplex line channel.

    Implementations report failures as ``ErrorCode`` values and never
    raise for link faults.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True if the link is open."""

    @abstractmethod
    def open(self, port_name: str, baud_rate: int = DEFAULT_BAUD_RATE) -> ErrorCode:
        """Open the link."""

    @abstractmethod
    def close(self) -> ErrorCode:
        """Close the link."""

    @abstractmethod
    def write_line(self, text: str) -> ErrorCode:
        """Write an already terminated line."""

    @abstractmethod
    def read_line(self, timeout_ms: int) -> Tuple[ErrorCode, Optional[str]]:
        """
        Read one line, without its terminator.

        Returns:
            (NO_ERROR, line), (READ_TIMED_OUT, None) or (READ_FAILED, None)
        """


class SerialTransport(Transport):
    """
    pyserial-backed transport.

    Parity, stop bits and flow control are left at pyserial defaults.
    """

    def __init__(self, terminator: str = LINE_TERMINATOR):
        self.port: Optional[serial.Serial] = None
        self.port_name: Optional[str] = None
        self.baud_rate: int = DEFAULT_BAUD_RATE
        self._eol = terminator[-1].encode('ascii')

    @property
    def is_open(self) -> bool:
        return self.port is not None and self.port.is_open

    def open(self, port_name: str, baud_rate: int = DEFAULT_BAUD_RATE) -> ErrorCode:
        """
        Open serial port

        Args:
            port_name: Port device name (e.g., "/dev/ttyUSB0", "COM3")
            baud_rate: Baud rate

        Returns:
            NO_ERROR, PORT_NAME_INVALID or OPEN_FAILED
        """
        if not port_name:
            return ErrorCode.PORT_NAME_INVALID

        if self.is_open:
            self.close()

        try:
            self.port = serial.Serial(port=port_name, baudrate=baud_rate)
        except (serial.SerialException, OSError, ValueError) as e:
            logger.warning(f"Cannot open {port_name} at {baud_rate} baud: {e}")
            self.port = None
            self.port_name = None
            return ErrorCode.OPEN_FAILED

        self.port_name = port_name
        self.baud_rate = baud_rate
        logger.info(f"Opened {port_name} at {baud_rate} baud")
        return ErrorCode.NO_ERROR

    def close(self) -> ErrorCode:
        port = self.port
        if port is None:
            return ErrorCode.NO_ERROR

        status = ErrorCode.NO_ERROR
        try:
            port.close()
        except (serial.SerialException, OSError) as e:
            logger.warning(f"Error closing {self.port_name}: {e}")
            status = ErrorCode.CLOSE_FAILED
        self.port = None
        self.port_name = None
        return status

    def write_line(self, text: str) -> ErrorCode:
        port = self.port
        if port is None or not port.is_open:
            return ErrorCode.WRITE_FAILED

        try:
            port.write(text.encode('ascii'))
            port.flush()
        except (serial.SerialException, OSError, UnicodeEncodeError) as e:
            logger.warning(f"Write to {self.port_name} failed: {e}")
            return ErrorCode.WRITE_FAILED

        logger.debug(f"TX {text!r}")
        return ErrorCode.NO_ERROR

    def read_line(self, timeout_ms: int) -> Tuple[ErrorCode, Optional[str]]:
        port = self.port
        if port is None or not port.is_open:
            return ErrorCode.READ_FAILED, None

        try:
            port.timeout = timeout_ms / 1000.0
            raw = port.read_until(self._eol)
        except (serial.SerialException, OSError) as e:
            logger.warning(f"Read from {self.port_name} failed: {e}")
            return ErrorCode.READ_FAILED, None

        if not raw.endswith(self._eol):
            # Partial data is dropped along with the timed-out read
            logger.debug(f"Read timed out after {timeout_ms} ms ({len(raw)} bytes pending)")
            return ErrorCode.READ_TIMED_OUT, None

        try:
            line = raw.decode('ascii').rstrip('\r\n')
        except UnicodeDecodeError:
            logger.warning(f"Non-ASCII reply from {self.port_name}: {raw!r}")
            return ErrorCode.READ_FAILED, None

        logger.debug(f"RX {line!r}")
        return ErrorCode.NO_ERROR, line
