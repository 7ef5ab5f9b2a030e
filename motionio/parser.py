"""
Reply parameter parser

Splits a reply line into tokens and classifies each one as an integer,
a real number or an opaque string. Order and raw text are preserved.

Example:
    >>> parser = ParameterParser()
    >>> status, tokens = parser.parse("0 12 3.5 ok")
    >>> [t.kind.name for t in tokens]
    ['INTEGER', 'INTEGER', 'REAL', 'STRING']
"""

import logging
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Optional, Union

from .constants import MAX_REPLY_TOKENS
from .errors import ErrorCode

logger = logging.getLogger(__name__)

# Space, CR and LF delimit tokens; tabs do not
_DELIMITERS = re.compile(r"[ \r\n]+")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_REAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class TokenKind(IntEnum):
    """Token classification"""
    INTEGER = 0
    REAL = 1
    STRING = 2


@dataclass(frozen=True)
class ParsedToken:
    """
    One reply token.

    Attributes:
        raw: Token text as received
        kind: INTEGER, REAL or STRING
        value: int or float for numeric kinds, None for strings
    """
    raw: str
    kind: TokenKind
    value: Optional[Union[int, float]] = None

    @classmethod
    def classify(cls, raw: str) -> 'ParsedToken':
        try:
            if _INTEGER.fullmatch(raw):
                return cls(raw, TokenKind.INTEGER, int(raw))
            if _REAL.fullmatch(raw):
                return cls(raw, TokenKind.REAL, float(raw))
        except ValueError:
            # int() refuses digit strings beyond the interpreter limit
            logger.warning(f"Numeric token too long to convert ({len(raw)} chars)")
        return cls(raw, TokenKind.STRING)

    @property
    def is_integer(self) -> bool:
        return self.kind is TokenKind.INTEGER

    @property
    def is_real(self) -> bool:
        return self.kind is TokenKind.REAL

    @property
    def is_numeric(self) -> bool:
        return self.kind is not TokenKind.STRING


class ParseOutcome(NamedTuple):
    status: ErrorCode
    tokens: List[ParsedToken]


class ParameterParser:
    """
    Tokenizer for reply lines.

    Every call builds a new token list; nothing is carried between calls.
    """

    def __init__(self, max_tokens: int = MAX_REPLY_TOKENS):
        if max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {max_tokens}")
        self.max_tokens = max_tokens

    def split(self, line: str) -> List[str]:
        return [t for t in _DELIMITERS.split(line) if t]

    def parse(self, line: Optional[str]) -> ParseOutcome:
        """
        Parse a reply line.

        Args:
            line: Reply line (terminator optional)

        Returns:
            ParseOutcome with NO_ERROR and the tokens, or MALFORMED_REPLY
            and an empty list for empty input or too many tokens
        """
        if not line:
            logger.warning("Empty reply line")
            return ParseOutcome(ErrorCode.MALFORMED_REPLY, [])

        raw_tokens = self.split(line)
        if not raw_tokens:
            logger.warning(f"Reply contains no tokens: {line!r}")
            return ParseOutcome(ErrorCode.MALFORMED_REPLY, [])

        if len(raw_tokens) > self.max_tokens:
            logger.warning(
                f"Reply has {len(raw_tokens)} tokens, limit is {self.max_tokens}: {line!r}"
            )
            return ParseOutcome(ErrorCode.MALFORMED_REPLY, [])

        return ParseOutcome(ErrorCode.NO_ERROR, [ParsedToken.classify(t) for t in raw_tokens])
