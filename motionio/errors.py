"""
Status codes returned by every public operation.

Nothing in the protocol core raises across component boundaries; each
step hands back one of these codes and the caller decides what to do.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Flat error taxonomy for the motion I/O link."""
    NO_ERROR = 0
    OPEN_FAILED = -100           # Bad port name, port busy, permission denied
    PORT_NAME_INVALID = -101     # Empty or missing port name
    READ_FAILED = -102           # Link fault while reading
    READ_TIMED_OUT = -103        # No terminated line within the read timeout
    WRITE_FAILED = -104          # Transport rejected the write
    TOO_MANY_DEBUG_LINES = -105  # Debug filter exceeded its bound
    MALFORMED_REPLY = -106       # Empty reply, too many tokens, bad result token
    CAPABILITIES_UNKNOWN = -107  # Address arithmetic before discovery
    CLOSE_FAILED = -108
    NOT_CONNECTED = -109
    CANCELLED = -110
    REGISTER_OUT_OF_RANGE = -111

    @property
    def ok(self) -> bool:
        return self is ErrorCode.NO_ERROR
