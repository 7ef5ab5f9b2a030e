"""
Shared fixtures and mock transports for the MotionIO test suite.
"""

import threading
from io import BytesIO
from typing import List, Optional, Tuple, Union
from unittest.mock import patch

import pytest

from motionio import CommandSession, ErrorCode, LinkConfig, Transport


class ScriptedTransport(Transport):
    """
    Transport that replays a fixed script of reads.

    Each script entry is either a line (returned with NO_ERROR) or an
    ErrorCode (returned as a failed read). An exhausted script times out.
    """

    def __init__(self, script: Optional[List[Union[str, ErrorCode]]] = None,
                 write_status: ErrorCode = ErrorCode.NO_ERROR):
        self.script = list(script or [])
        self.write_status = write_status
        self.written: List[str] = []
        self.reads = 0
        self.opened: Optional[Tuple[str, int]] = None
        self.open_status = ErrorCode.NO_ERROR
        self.close_status = ErrorCode.NO_ERROR
        self._open = False
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, port_name: str, baud_rate: int = 256000) -> ErrorCode:
        self.opened = (port_name, baud_rate)
        self._open = self.open_status is ErrorCode.NO_ERROR
        return self.open_status

    def close(self) -> ErrorCode:
        self._open = False
        return self.close_status

    def write_line(self, text: str) -> ErrorCode:
        with self._lock:
            self.written.append(text)
        return self.write_status

    def read_line(self, timeout_ms: int) -> Tuple[ErrorCode, Optional[str]]:
        with self._lock:
            self.reads += 1
            if not self.script:
                return ErrorCode.READ_TIMED_OUT, None
            item = self.script.pop(0)
        if isinstance(item, ErrorCode):
            return item, None
        return ErrorCode.NO_ERROR, item

    def feed(self, *lines: Union[str, ErrorCode]) -> None:
        with self._lock:
            self.script.extend(lines)


class DebugFloodTransport(ScriptedTransport):
    """Transport that only ever yields debug lines."""

    def read_line(self, timeout_ms: int) -> Tuple[ErrorCode, Optional[str]]:
        with self._lock:
            self.reads += 1
            return ErrorCode.NO_ERROR, f"D:flood {self.reads}"


class MockSerial:
    """Mock serial port for testing SerialTransport without hardware."""

    def __init__(self, *args, **kwargs):
        self.init_args = args
        self.init_kwargs = kwargs
        self.written = []
        self.read_buffer = BytesIO()
        self.is_open = True
        self.timeout = None
        self.flushed = 0

    def write(self, data: bytes) -> int:
        self.written.append(data)
        return len(data)

    def flush(self):
        self.flushed += 1

    def read_until(self, expected: bytes = b'\n') -> bytes:
        data = self.read_buffer.read()
        idx = data.find(expected)
        if idx < 0:
            self.read_buffer = BytesIO()
            return data
        self.read_buffer = BytesIO(data[idx + len(expected):])
        return data[:idx + len(expected)]

    def inject_response(self, raw: bytes):
        """Append raw bytes to the read buffer."""
        remaining = self.read_buffer.read()
        self.read_buffer = BytesIO(remaining + raw)

    def close(self):
        self.is_open = False


@pytest.fixture
def transport():
    """Open scripted transport."""
    t = ScriptedTransport()
    t.open('/dev/test', 256000)
    return t


@pytest.fixture
def session(transport):
    """Command session on a scripted transport with a short timeout."""
    return CommandSession(transport, LinkConfig(read_timeout_ms=50, max_debug_lines=8))


@pytest.fixture
def mock_serial():
    """Patch serial.Serial with a MockSerial instance."""
    instance = MockSerial()
    with patch('serial.Serial', return_value=instance) as serial_class:
        yield instance, serial_class
