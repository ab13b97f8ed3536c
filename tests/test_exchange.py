"""Tests for the command / acknowledgement exchange."""

import io

import pytest

from urg_mcp.protocol.errors import ConnectionClosed, EchoMismatch, StatusMismatch
from urg_mcp.protocol.exchange import CommandExchange
from urg_mcp.protocol.framing import LineReader

from device_script import ack, echo, status


def _exchange(script: bytes) -> tuple[CommandExchange, io.BytesIO, io.BytesIO]:
    stream = io.BytesIO(script)
    writer = io.BytesIO()
    return CommandExchange(LineReader(stream), writer), stream, writer


def test_send_and_verify_writes_command_line():
    """The command is written with a trailing newline."""
    exchange, _, writer = _exchange(ack("BM"))
    exchange.send_and_verify("BM", "00")
    assert writer.getvalue() == b"BM\n"


def test_send_and_verify_leaves_following_lines():
    """Only the echo and status are consumed."""
    exchange, stream, _ = _exchange(ack("BM") + b"\n")
    exchange.send_and_verify("BM", "00")
    assert stream.read() == b"\n"


def test_echo_mismatch():
    """A different echo fails before the status is read."""
    exchange, stream, _ = _exchange(echo("QT") + status("00") + b"\n")
    with pytest.raises(EchoMismatch) as exc_info:
        exchange.send_and_verify("BM", "00")
    assert exc_info.value.sent == "BM"
    assert exc_info.value.received == b"QT"
    assert stream.read() == status("00") + b"\n"


def test_status_mismatch():
    """The received status is reported with the command."""
    exchange, _, _ = _exchange(ack("RB", "01"))
    with pytest.raises(StatusMismatch) as exc_info:
        exchange.send_and_verify("RB", "00")
    assert exc_info.value.cmd == "RB"
    assert exc_info.value.expected == "00"
    assert exc_info.value.received == b"01"


def test_status_mismatch_on_terminator():
    """A missing status line is a mismatch, not a crash."""
    exchange, _, _ = _exchange(echo("BM") + b"\n")
    with pytest.raises(StatusMismatch):
        exchange.send_and_verify("BM", "00")


def test_verify_only_writes_nothing():
    """Continuation frames are checked without sending."""
    exchange, _, writer = _exchange(ack("MD0000108000002", "99"))
    exchange.verify_only("MD0000108000002", "99")
    assert writer.getvalue() == b""


def test_device_hangs_up():
    """End of stream before the status line raises ConnectionClosed."""
    exchange, _, _ = _exchange(echo("VV"))
    with pytest.raises(ConnectionClosed):
        exchange.send_and_verify("VV", "00")
