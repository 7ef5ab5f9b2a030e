"""
Test Suite for the Reply Reader and Command Session
===================================================

This test suite validates:
1. Debug line filtering and its bound
2. Read faults and cancellation
3. The write -> read -> parse pipeline and its short-circuits
4. Designated result tokens
5. Serialization of concurrent callers

Run with:
    pytest tests/test_session.py -v
"""

import threading
import time

import pytest

from conftest import DebugFloodTransport, ScriptedTransport
from motionio import (
    Command, CommandSession, ErrorCode, LinkConfig, ReplyReader, SessionState, TokenKind,
)


# =============================================================================
# REPLY READER
# =============================================================================

class TestReplyReader:
    """Test ReplyReader.read_reply."""

    def test_returns_first_line(self, transport):
        transport.feed("0 1 2")
        outcome = ReplyReader(transport).read_reply()
        assert outcome.status == ErrorCode.NO_ERROR
        assert outcome.line == "0 1 2"
        assert outcome.debug_lines == 0

    def test_discards_debug_lines(self, transport):
        transport.feed("D:noise", "D:more noise", "5 1 2 3")
        outcome = ReplyReader(transport).read_reply()
        assert outcome.status == ErrorCode.NO_ERROR
        assert outcome.line == "5 1 2 3"
        assert outcome.debug_lines == 2
        assert transport.reads == 3

    def test_debug_callback(self, transport):
        seen = []
        transport.feed("D:a", "D:b", "0")
        ReplyReader(transport, on_debug_line=seen.append).read_reply()
        assert seen == ["D:a", "D:b"]

    def test_prefix_must_lead(self, transport):
        """A line containing D: later on is a real reply."""
        transport.feed("0 D:1")
        outcome = ReplyReader(transport).read_reply()
        assert outcome.line == "0 D:1"

    def test_timeout_propagates(self, transport):
        outcome = ReplyReader(transport, timeout_ms=10).read_reply()
        assert outcome.status == ErrorCode.READ_TIMED_OUT
        assert outcome.line is None

    def test_timeout_after_debug_lines(self, transport):
        transport.feed("D:x")
        outcome = ReplyReader(transport).read_reply()
        assert outcome.status == ErrorCode.READ_TIMED_OUT
        assert outcome.debug_lines == 1

    def test_read_fault_propagates(self, transport):
        transport.feed(ErrorCode.READ_FAILED, "0 1 2")
        outcome = ReplyReader(transport).read_reply()
        assert outcome.status == ErrorCode.READ_FAILED
        assert transport.reads == 1

    @pytest.mark.timeout(5)
    def test_debug_flood_is_bounded(self):
        transport = DebugFloodTransport()
        outcome = ReplyReader(transport, max_debug_lines=16).read_reply()
        assert outcome.status == ErrorCode.TOO_MANY_DEBUG_LINES
        assert outcome.line is None
        assert transport.reads == 16

    def test_bound_allows_one_below_limit(self, transport):
        transport.feed(*["D:x"] * 3, "0")
        outcome = ReplyReader(transport, max_debug_lines=4).read_reply()
        assert outcome.status == ErrorCode.NO_ERROR
        assert outcome.debug_lines == 3

    def test_bound_reached_stops_reading(self, transport):
        """The read after the last tolerated debug line never happens."""
        transport.feed(*["D:x"] * 4, "0")
        outcome = ReplyReader(transport, max_debug_lines=4).read_reply()
        assert outcome.status == ErrorCode.TOO_MANY_DEBUG_LINES
        assert outcome.debug_lines == 4
        assert transport.reads == 4

    def test_cancel_before_read(self, transport):
        transport.feed("0 1 2")
        cancel = threading.Event()
        cancel.set()
        outcome = ReplyReader(transport).read_reply(cancel)
        assert outcome.status == ErrorCode.CANCELLED
        assert transport.reads == 0

    def test_cancel_between_reads(self, transport):
        cancel = threading.Event()
        transport.feed("D:a", "D:b", "0")
        reader = ReplyReader(transport, on_debug_line=lambda line: cancel.set())
        outcome = reader.read_reply(cancel)
        assert outcome.status == ErrorCode.CANCELLED
        assert outcome.debug_lines == 1


# =============================================================================
# COMMAND SESSION
# =============================================================================

class TestCommandSession:
    """Test CommandSession.execute."""

    def test_success(self, session, transport):
        transport.feed("0 7 42")
        result = session.execute(Command.of('r', 1, 0, 0), result_index=2)
        assert result.ok
        assert result.result == 42
        assert [t.value for t in result.tokens] == [0, 7, 42]
        assert result.reply == "0 7 42"
        assert transport.written == ["r 1 0 0\n"]
        assert session.state == SessionState.DONE

    def test_no_result_requested(self, session, transport):
        transport.feed("ok")
        result = session.execute(Command.of('T', 0, 0, 0))
        assert result.ok
        assert result.result is None
        assert result.tokens[0].kind == TokenKind.STRING

    def test_query_uses_family_index(self, session, transport):
        transport.feed("0 4 513")
        result = session.query(Command.of('T', 4, 0, 0))
        assert result.result == 513

    def test_write_failure_skips_read(self, transport):
        transport.write_status = ErrorCode.WRITE_FAILED
        transport.feed("0 1 2")
        session = CommandSession(transport)
        result = session.execute(Command.of('w', 1, 2, 3), result_index=2)
        assert result.status == ErrorCode.WRITE_FAILED
        assert transport.reads == 0
        assert result.tokens == []
        assert result.result is None
        assert result.reply is None
        assert session.state == SessionState.FAILED

    def test_read_timeout(self, session, transport):
        result = session.execute(Command.of('r', 1, 0, 0))
        assert result.status == ErrorCode.READ_TIMED_OUT
        assert result.tokens == []

    def test_debug_lines_filtered(self, session, transport):
        transport.feed("D:noise", "D:more noise", "5 1 2 3")
        result = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        assert result.ok
        assert result.result == 2
        assert result.debug_lines == 2

    def test_debug_flood(self):
        transport = DebugFloodTransport()
        session = CommandSession(transport, LinkConfig(max_debug_lines=3))
        result = session.execute(Command.of('r', 0, 0, 0))
        assert result.status == ErrorCode.TOO_MANY_DEBUG_LINES
        assert result.debug_lines == 3

    def test_malformed_reply(self, session, transport):
        transport.feed("   ")
        result = session.execute(Command.of('r', 0, 0, 0))
        assert result.status == ErrorCode.MALFORMED_REPLY
        assert result.tokens == []
        assert result.reply == "   "

    def test_too_many_tokens(self, session, transport):
        transport.feed(" ".join(["1"] * 11))
        result = session.execute(Command.of('r', 0, 0, 0))
        assert result.status == ErrorCode.MALFORMED_REPLY

    def test_missing_result_token(self, session, transport):
        transport.feed("0 1")
        result = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        assert result.status == ErrorCode.MALFORMED_REPLY
        assert result.result is None
        assert result.tokens == []

    def test_non_integer_result_token(self, session, transport):
        transport.feed("0 1 2.5")
        result = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        assert result.status == ErrorCode.MALFORMED_REPLY

    def test_oversized_result_token(self, session, transport):
        """A huge digit run in the result slot is a malformed reply, not an exception."""
        transport.feed("0 4 " + "9" * 5000)
        result = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        assert result.status == ErrorCode.MALFORMED_REPLY
        assert result.result is None

    def test_results_are_fresh(self, session, transport):
        transport.feed("0 1 2 3 4", "0 1 9")
        first = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        second = session.execute(Command.of('r', 0, 0, 0), result_index=2)
        assert first is not second
        assert len(first.tokens) == 5
        assert [t.value for t in second.tokens] == [0, 1, 9]

    def test_uses_config_terminator(self, transport):
        transport.feed("0")
        session = CommandSession(transport, LinkConfig(terminator="\r\n"))
        session.execute(Command.of('T', 2, 0, 0))
        assert transport.written == ["T 2 0 0\r\n"]

    def test_bad_command_raises_before_write(self, session, transport):
        with pytest.raises(ValueError):
            session.execute(Command.of('rr', 1))
        assert transport.written == []


class SlowTransport(ScriptedTransport):
    """Scripted transport that records overlapping exchanges."""

    def __init__(self):
        super().__init__()
        self._open = True
        self.in_flight = 0
        self.max_in_flight = 0

    def write_line(self, text):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        return super().write_line(text)

    def read_line(self, timeout_ms):
        time.sleep(0.01)
        with self._lock:
            self.in_flight -= 1
            self.reads += 1
        return ErrorCode.NO_ERROR, "0 0 1"


class TestSessionConcurrency:
    """Test that execute calls never overlap on one transport."""

    @pytest.mark.timeout(10)
    def test_exchanges_are_serialized(self):
        transport = SlowTransport()
        session = CommandSession(transport)
        results = []

        def worker():
            for _ in range(5):
                results.append(session.execute(Command.of('r', 0, 0, 0), result_index=2))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert transport.max_in_flight == 1
        assert len(results) == 20
        assert all(r.ok and r.result == 1 for r in results)
