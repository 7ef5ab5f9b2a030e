#!/usr/bin/env python3
"""
Command-line interface for the motion I/O driver.

Entry point for the ``motionio`` command.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import LinkConfig
from .constants import DEFAULT_BAUD_RATE, MAX_DEBUG_LINES, READ_TIMEOUT_MS
from .driver import MotionIO
from .errors import ErrorCode


def _command_letter(value: str) -> str:
    if len(value) != 1 or value.isspace() or not value.isprintable():
        raise argparse.ArgumentTypeError(f"command letter must be one character, got {value!r}")
    return value


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='motionio',
        description="Motion-control board command tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    motionio --port /dev/ttyUSB0 ping
    motionio --port /dev/ttyUSB0 discover
    motionio --port COM3 exec r 1 0 0
        """
    )
    parser.add_argument('--port', '-p', default='/dev/ttyUSB0',
                        help='Serial port (default: /dev/ttyUSB0)')
    parser.add_argument('--baudrate', '-b', type=_positive_int, default=DEFAULT_BAUD_RATE,
                        help=f'Baudrate (default: {DEFAULT_BAUD_RATE})')
    parser.add_argument('--timeout-ms', type=_positive_int, default=READ_TIMEOUT_MS,
                        help=f'Per-read timeout in milliseconds (default: {READ_TIMEOUT_MS})')
    parser.add_argument('--max-debug-lines', type=_positive_int, default=MAX_DEBUG_LINES,
                        help=f'Debug lines tolerated per reply (default: {MAX_DEBUG_LINES})')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log wire traffic')

    sub = parser.add_subparsers(dest='command', required=True)
    for name in ('ping', 'soft-check', 'hard-check', 'restart', 'discover'):
        sub.add_parser(name)

    exec_parser = sub.add_parser('exec', help='Execute "<letter> <port> <register> <data>"')
    exec_parser.add_argument('letter', type=_command_letter)
    exec_parser.add_argument('board_port', metavar='port', type=int)
    exec_parser.add_argument('register', type=int)
    exec_parser.add_argument('data', type=int)
    return parser


def run(args: argparse.Namespace, board: MotionIO) -> ErrorCode:
    status = board.init(args.port, args.baudrate)
    if status is not ErrorCode.NO_ERROR:
        print(f"Cannot open {args.port}: {status.name}")
        return status

    try:
        if args.command == 'exec':
            status, value = board.execute(args.letter, args.board_port, args.register, args.data)
            print(f"{status.name} {value if value is not None else ''}".rstrip())
        elif args.command == 'discover':
            status, amap = board.discover_capabilities()
            print(status.name)
            if amap is not None:
                print(f"  capability word: 0x{amap.capability_word:X}")
                print(f"  PWM: {amap.pwm_units} units @ {amap.pwm_base}")
                print(f"  QE:  {amap.qe_units} units @ {amap.qe_base}")
                print(f"  RC:  {amap.rc_units} units @ {amap.rc_base}")
        else:
            status = {
                'ping': board.ping,
                'soft-check': board.soft_check,
                'hard-check': board.hard_check,
                'restart': board.restart,
            }[args.command]()
            print(status.name)
    finally:
        board.close()

    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    config = LinkConfig(
        port=args.port,
        baudrate=args.baudrate,
        read_timeout_ms=args.timeout_ms,
        max_debug_lines=args.max_debug_lines,
    )
    status = run(args, MotionIO(config=config))
    return 0 if status is ErrorCode.NO_ERROR else 1


if __name__ == '__main__':
    sys.exit(main())
