"""Pull-driven sequence of frames from an MD/ME multi scan.

After the request is acknowledged with status ``00`` the device sends
frames on its own. Each frame repeats the command line with the count
field lowered to the number of frames still to come, status ``99``, a
timestamp and a data block::

    MD0000108000003   00P   <terminator>        request acknowledgement
    MD0000108000002   99b   ts   data...   <terminator>
    MD0000108000001   99b   ts   data...   <terminator>
    MD0000108000000   99b   ts   data...   <terminator>

An infinite request (count ``00``) repeats the original line unchanged
for every frame.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from .models.scan import ScanRecord, ScanRequest
from .protocol.commands import STATUS_CONTINUE
from .protocol.errors import ScanStreamError
from .protocol.exchange import CommandExchange
from .protocol.parser import read_scan

logger = logging.getLogger(__name__)


class ScanStream:
    """Single-use, forward-only iterator over the frames of one multi scan.

    Bounded requests yield exactly ``scan_count`` records. Infinite
    requests yield until the consumer stops pulling; see :meth:`until`.
    Any error while reading a frame propagates and leaves the stream
    unusable; issue a new request to resume.
    """

    def __init__(self, exchange: CommandExchange, request: ScanRequest) -> None:
        self._exchange = exchange
        self._request = request
        self._remaining: int | None = None if request.infinite else request.scan_count
        self._failed = False

    @property
    def request(self) -> ScanRequest:
        return self._request

    @property
    def remaining(self) -> int | None:
        """Frames still to deliver, or None in infinite mode."""
        return self._remaining

    @property
    def has_intensity(self) -> bool:
        return self._request.has_intensity

    @property
    def failed(self) -> bool:
        return self._failed

    def __iter__(self) -> Iterator[ScanRecord]:
        return self

    def __next__(self) -> ScanRecord:
        if self._failed:
            raise ScanStreamError("scan stream is unusable after a previous failure")
        if self._remaining == 0:
            raise StopIteration

        try:
            return self._pull()
        except Exception:
            self._failed = True
            raise

    def _pull(self) -> ScanRecord:
        if self._remaining is None:
            cmd = self._request.to_command()
        else:
            self._remaining -= 1
            cmd = self._request.to_command(self._remaining)

        self._exchange.verify_only(cmd, STATUS_CONTINUE)
        record = read_scan(self._exchange.reader, self.has_intensity)
        logger.debug(
            "frame ts=%d samples=%d remaining=%s",
            record.timestamp,
            len(record.distances),
            "inf" if self._remaining is None else self._remaining,
        )
        return record

    def until(self, stop: Callable[[ScanRecord], bool]) -> Iterator[ScanRecord]:
        """Yield records until ``stop`` returns True.

        The record that triggered the stop is still yielded; no further
        frame is read after it.
        """
        for record in self:
            yield record
            if stop(record):
                return
