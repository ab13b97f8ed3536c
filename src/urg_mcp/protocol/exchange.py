"""One command, one acknowledgement.

Every exchange starts the same way: the command line goes out, the
device echoes it back verbatim, then sends a 2-digit status. Whatever
follows (fields, a scan, or just the terminator) is read by the caller.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from .errors import EchoMismatch, StatusMismatch
from .framing import LF, LineReader

logger = logging.getLogger(__name__)


class CommandExchange:
    """Sends command lines and validates the echo + status acknowledgement.

    Not thread-safe: one exchange may be in flight per connection.
    """

    def __init__(self, reader: LineReader, writer: BinaryIO) -> None:
        self.reader = reader
        self._writer = writer

    def send(self, cmd: str) -> None:
        """Write a command line and flush it."""
        logger.debug("-> %s", cmd)
        self._writer.write(cmd.encode("ascii") + LF)
        self._writer.flush()

    def send_and_verify(self, cmd: str, expected_status: str) -> None:
        """Send ``cmd`` and validate the device's acknowledgement.

        Raises:
            EchoMismatch: If the echoed line differs from ``cmd``.
            StatusMismatch: If the status code differs from ``expected_status``.
            ConnectionClosed: If the device hangs up.
        """
        self.send(cmd)
        self.verify_only(cmd, expected_status)

    def verify_only(self, cmd: str, expected_status: str) -> None:
        """Validate an acknowledgement without writing anything.

        Used for the frames of a multi scan, which the device sends on its
        own, each introduced by a continuation echo and status.
        """
        echo = self.reader.read_line().text
        if echo != cmd.encode("ascii"):
            raise EchoMismatch(cmd, echo)

        status = self.reader.read_payload()
        logger.debug("<- %s %s", cmd, status.decode("ascii", errors="replace"))
        if status != expected_status.encode("ascii"):
            raise StatusMismatch(cmd, expected_status, status)
