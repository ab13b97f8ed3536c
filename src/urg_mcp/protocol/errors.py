"""Errors raised by the protocol engine.

None of these are retried internally. A failure inside a scan stream
leaves the stream unusable, but the connection itself stays open.
"""

from __future__ import annotations


class UrgError(Exception):
    """Base class for all device communication errors."""


class ConnectionClosed(UrgError, ConnectionError):
    """The stream ended while a response was still expected."""


class ProtocolError(UrgError):
    """The device response violated the request/response framing."""


class EchoMismatch(ProtocolError):
    """The echoed command line differs from the one that was sent."""

    def __init__(self, sent: str, received: bytes) -> None:
        self.sent = sent
        self.received = received
        super().__init__(f"send cmd {sent!r} failed: echo {received!r}")


class StatusMismatch(ProtocolError):
    """The status code differs from the one the exchange expects."""

    def __init__(self, cmd: str, expected: str, received: bytes) -> None:
        self.cmd = cmd
        self.expected = expected
        self.received = received
        super().__init__(
            f"send cmd {cmd!r} failed: status {received!r} != {expected!r}"
        )


class ChecksumMismatch(ProtocolError):
    """A line's trailing checksum character does not match its content."""

    def __init__(self, line: bytes, expected: int, received: int) -> None:
        self.line = line
        self.expected = expected
        self.received = received
        super().__init__(
            f"checksum mismatch on {line!r}: "
            f"expected {chr(expected)!r}, got {chr(received)!r}"
        )


class MalformedField(ProtocolError):
    """A field line failed its length or parse constraints."""


class MalformedTimestamp(ProtocolError):
    """The timestamp line of a scan response is not 4 encoded characters."""


class MalformedBlock(ProtocolError):
    """A data block is not a whole number of sample records."""


class ScanStreamError(UrgError):
    """A scan stream was used after it failed."""
