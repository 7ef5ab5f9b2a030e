"""
Command Protocol for the FPGA/uP Motion-Control Board
=====================================================

This module defines the line-based protocol used to talk to the
motion-control board over a serial link.

Protocol Overview
-----------------
Every exchange is one command line from the host followed by one reply
line from the board. Values are separated by single spaces.

Input (Host -> Device):
    <letter> <port> <register> <data>   - General register command
    T 0 0 0                             - Soft bus check
    T 1 0 0                             - Hard bus check (device-side reset)
    T 2 0 0                             - Ping (microcontroller only)
    T 3 0 0                             - Restart
    T 4 0 0                             - Read capability register

Output (Device -> Host):
    <status> <token> <result> ...       - Reply (whitespace separated)
    D:<text>                            - Asynchronous debug output
"""


class LinePrefix:
    """Prefixes for unsolicited lines from device to host."""
    DEBUG = "D:"         # Debug output, never a reply


class CommandLetter:
    """Command letters understood by the board."""
    READ = "r"           # Read register
    WRITE = "w"          # Write register
    TEST = "T"           # Diagnostics family


# Link defaults
DEFAULT_BAUD_RATE = 256000
READ_TIMEOUT_MS = 10000
LINE_TERMINATOR = "\n"

# Reply limits
MAX_REPLY_TOKENS = 10
MAX_DEBUG_LINES = 64

# Index of the reply token holding the scalar answer, per command family.
# Replies are "<status> <echo> <value> ...", so the value is the third token.
DEFAULT_RESULT_INDEX = 2
RESULT_TOKEN_INDEX = {
    CommandLetter.READ: 2,
    CommandLetter.WRITE: 2,
    CommandLetter.TEST: 2,
}

# Register block sizes
SYS_BASE = 0
SYS_REGISTERS = 1
REGISTERS_PER_PWM = 4
REGISTERS_PER_QE = 7
REGISTERS_PER_RC = 4

# Capability word: 4-bit unit counts
UNIT_COUNT_MASK = 0xF
PWM_UNITS_SHIFT = 8
QE_UNITS_SHIFT = 12
RC_UNITS_SHIFT = 16


def result_index_for(letter: str) -> int:
    """Result token index for a command letter."""
    return RESULT_TOKEN_INDEX.get(letter, DEFAULT_RESULT_INDEX)
