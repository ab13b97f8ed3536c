"""Line framing for SCIP responses.

Every response is a sequence of ``\\n``-terminated lines::

    +-----------------+----------------------+----------------------------+------------+
    | Echo            | Status               | Data lines (0..n)          | Terminator |
    | command "\\n"    | code, sum, "\\n"      | payload, sum, "\\n"         | "\\n"       |
    +-----------------+----------------------+----------------------------+------------+

- Echo: the command exactly as sent, no checksum
- Status: 2-digit code followed by a checksum character
- Data: up to 64 payload bytes followed by a checksum character
- Terminator: a line holding only the newline; ends the block

Scan responses start their data lines with a 4-character encoded
timestamp line. The concatenated payloads of the remaining lines form the
data block.

Checksums are read but only checked when the reader is built with
``verify_checksum=True``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from ..utils.checksum import scip_checksum
from .codec import decode6
from .errors import ChecksumMismatch, ConnectionClosed, MalformedTimestamp

LF = b"\n"
TIMESTAMP_SIZE = 4


@dataclass(frozen=True)
class Line:
    """A raw response line, newline included."""

    raw: bytes

    @property
    def is_terminator(self) -> bool:
        return len(self.raw) == 1

    @property
    def content(self) -> bytes:
        """Usable content: the line minus its checksum and newline."""
        return self.raw[:-2]

    @property
    def text(self) -> bytes:
        """The line minus its newline. Used for the command echo."""
        return self.raw[:-1]

    @property
    def checksum(self) -> int | None:
        if len(self.raw) < 2:
            return None
        return self.raw[-2]

    def expected_checksum(self, tagged: bool = False) -> int:
        covered = self.content
        # Tagged field lines (TAG:value;) are summed without the trailing ';'.
        if tagged and covered.endswith(b";"):
            covered = covered[:-1]
        return scip_checksum(covered)

    def __repr__(self) -> str:
        return f"Line({self.raw!r})"


class LineReader:
    """Reads and classifies lines from the buffered read half of a connection."""

    def __init__(self, stream: BinaryIO, verify_checksum: bool = False) -> None:
        self._stream = stream
        self.verify_checksum = verify_checksum

    def read_line(self) -> Line:
        """Block until a full line is read.

        Raises:
            ConnectionClosed: If the stream ends before a newline.
        """
        raw = self._stream.readline()
        if not raw:
            raise ConnectionClosed("connection closed by device")
        if not raw.endswith(LF):
            raise ConnectionClosed(f"connection closed mid-line: {raw!r}")
        return Line(raw)

    def read_payload(self, tagged: bool = False) -> bytes:
        """Read one checksummed line and return its usable content."""
        line = self.read_line()
        if self.verify_checksum and not line.is_terminator:
            self._check(line, tagged)
        return line.content

    def read_block(self, tagged: bool = False) -> bytes:
        """Concatenate data line payloads up to and including the terminator.

        With ``tagged``, lines are checked as ``TAG:value;`` fields.
        """
        block = bytearray()
        while True:
            line = self.read_line()
            if line.is_terminator:
                return bytes(block)
            if self.verify_checksum:
                self._check(line, tagged)
            block += line.content

    def read_timestamp(self) -> int:
        """Read the 4-character timestamp line that opens a scan response."""
        line = self.read_line()
        if len(line.content) != TIMESTAMP_SIZE or line.is_terminator:
            raise MalformedTimestamp(f"recv wrong timestamp data {line.raw!r}")
        if self.verify_checksum:
            self._check(line)
        return decode6(line.content)

    def _check(self, line: Line, tagged: bool = False) -> None:
        expected = line.expected_checksum(tagged)
        if line.checksum != expected:
            raise ChecksumMismatch(line.raw, expected, line.checksum or 0)
