"""Session with one URG sensor.

Usage::

    with Urg.open("192.168.0.10") as urg:
        params = urg.get_sensor_params()
        urg.start_capture()
        record = urg.get_distance(params.start_step, params.end_step)
        for record in urg.get_distance_multi(0, 1080, 0, 0, 10):
            ...
        for record in urg.get_distance_infinite(0, 1080, until=lambda r: done()):
            ...
        urg.stop_capture()

Opening a session only connects. Version, parameters and status are
queried on demand and never cached, so every getter costs one exchange.

Every call blocks until its exchange completes and there is no deadline
once connected. A session is not thread-safe: callers must serialize
access, including while a scan stream is being consumed.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Iterator, Protocol

from .models.scan import CaptureState, ScanRecord, ScanRequest
from .models.sensor import SensorParams, StatusInfo, VersionInfo
from .protocol.commands import (
    STATUS_OK,
    STATUS_REBOOT_ARMED,
    Command,
    build_command,
    build_single_scan,
)
from .protocol.exchange import CommandExchange
from .protocol.framing import LineReader
from .protocol.parser import (
    parse_sensor_params,
    parse_status_info,
    parse_version_info,
    read_scan,
)
from .scan_stream import ScanStream
from .transport.tcp_connection import (
    CONNECT_TIMEOUT_S,
    DEFAULT_PORT,
    TCPConnection,
)

logger = logging.getLogger(__name__)

MAX_SCAN_COUNT = 99


class Connection(Protocol):
    """What a session needs from its transport."""

    @property
    def connected(self) -> bool: ...

    @property
    def reader(self) -> BinaryIO: ...

    @property
    def writer(self) -> BinaryIO: ...

    def close(self) -> None: ...


class Urg:
    """Queries, capture control and scan retrieval over one connection."""

    def __init__(self, connection: Connection, verify_checksum: bool = False) -> None:
        self._connection = connection
        self._exchange = CommandExchange(
            LineReader(connection.reader, verify_checksum=verify_checksum),
            connection.writer,
        )
        self._capture_state = CaptureState.IDLE

    @classmethod
    def open(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float | None = CONNECT_TIMEOUT_S,
        verify_checksum: bool = False,
    ) -> Urg:
        """Connect to a sensor. No command is sent."""
        connection = TCPConnection(host, port, connect_timeout=connect_timeout)
        connection.open()
        return cls(connection, verify_checksum=verify_checksum)

    def __enter__(self) -> Urg:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._connection.connected

    @property
    def capture_state(self) -> CaptureState:
        return self._capture_state

    @property
    def is_capturing(self) -> bool:
        return self._capture_state is CaptureState.CAPTURING

    def close(self) -> None:
        self._connection.close()

    def _get_exchange(self) -> CommandExchange:
        if not self._connection.connected:
            raise ConnectionError("Not connected to device")
        return self._exchange

    # ─── QUERIES ─────────────────────────────────────────────────────

    def get_version_info(self) -> VersionInfo:
        exchange = self._get_exchange()
        exchange.send_and_verify(build_command(Command.VERSION), STATUS_OK)
        return parse_version_info(exchange.reader)

    def get_sensor_params(self) -> SensorParams:
        exchange = self._get_exchange()
        exchange.send_and_verify(build_command(Command.PARAMETERS), STATUS_OK)
        return parse_sensor_params(exchange.reader)

    def get_status_info(self) -> StatusInfo:
        exchange = self._get_exchange()
        exchange.send_and_verify(build_command(Command.STATUS), STATUS_OK)
        return parse_status_info(exchange.reader)

    # ─── CAPTURE LIFECYCLE ───────────────────────────────────────────

    def start_capture(self) -> None:
        """Switch the laser on (BM)."""
        self._simple(Command.LASER_ON, STATUS_OK)
        self._capture_state = CaptureState.CAPTURING
        logger.info("Capture started")

    def stop_capture(self) -> None:
        """Switch the laser off (QT)."""
        self._simple(Command.LASER_OFF, STATUS_OK)
        self._capture_state = CaptureState.IDLE
        logger.info("Capture stopped")

    def reboot(self) -> None:
        """Reboot the sensor (RB, confirmed by a second RB).

        The session is closed afterwards.
        """
        self._simple(Command.REBOOT, STATUS_REBOOT_ARMED)
        self._simple(Command.REBOOT, STATUS_OK)
        logger.info("Sensor rebooting")
        self._capture_state = CaptureState.IDLE
        self.close()

    def _simple(self, command: Command, expected_status: str) -> None:
        exchange = self._get_exchange()
        exchange.send_and_verify(build_command(command), expected_status)
        exchange.reader.read_block()

    # ─── SINGLE SCANS ────────────────────────────────────────────────

    def get_distance(
        self, start_step: int, end_step: int, cluster_count: int = 0
    ) -> ScanRecord:
        """Take one distance scan (GD)."""
        return self._single(Command.GET_DISTANCE, start_step, end_step, cluster_count)

    def get_distance_intensity(
        self, start_step: int, end_step: int, cluster_count: int = 0
    ) -> ScanRecord:
        """Take one distance + intensity scan (GE)."""
        return self._single(
            Command.GET_DISTANCE_INTENSITY, start_step, end_step, cluster_count
        )

    def _single(
        self, command: Command, start_step: int, end_step: int, cluster_count: int
    ) -> ScanRecord:
        cmd = build_single_scan(command, start_step, end_step, cluster_count)
        exchange = self._get_exchange()
        exchange.send_and_verify(cmd, STATUS_OK)
        return read_scan(
            exchange.reader, with_intensity=command is Command.GET_DISTANCE_INTENSITY
        )

    # ─── MULTI SCANS ─────────────────────────────────────────────────

    def get_distance_multi(
        self,
        start_step: int,
        end_step: int,
        cluster_count: int,
        scan_skip_count: int,
        scan_count: int,
    ) -> ScanStream:
        """Request ``scan_count`` distance scans (MD), delivered lazily."""
        return self._multi(
            Command.MULTI_DISTANCE,
            start_step,
            end_step,
            cluster_count,
            scan_skip_count,
            _check_scan_count(scan_count),
        )

    def get_distance_intensity_multi(
        self,
        start_step: int,
        end_step: int,
        cluster_count: int,
        scan_skip_count: int,
        scan_count: int,
    ) -> ScanStream:
        """Request ``scan_count`` distance + intensity scans (ME), delivered lazily."""
        return self._multi(
            Command.MULTI_DISTANCE_INTENSITY,
            start_step,
            end_step,
            cluster_count,
            scan_skip_count,
            _check_scan_count(scan_count),
        )

    def get_distance_infinite(
        self,
        start_step: int,
        end_step: int,
        cluster_count: int = 0,
        scan_skip_count: int = 0,
        until: Callable[[ScanRecord], bool] | None = None,
    ) -> Iterator[ScanRecord]:
        """Stream distance scans (MD, count 00).

        With ``until``, iteration ends after the first record for which it
        returns True. Without it, the consumer stops by not pulling again.
        """
        stream = self._multi(
            Command.MULTI_DISTANCE, start_step, end_step, cluster_count, scan_skip_count, 0
        )
        return stream if until is None else stream.until(until)

    def get_distance_intensity_infinite(
        self,
        start_step: int,
        end_step: int,
        cluster_count: int = 0,
        scan_skip_count: int = 0,
        until: Callable[[ScanRecord], bool] | None = None,
    ) -> Iterator[ScanRecord]:
        """Stream distance + intensity scans (ME, count 00)."""
        stream = self._multi(
            Command.MULTI_DISTANCE_INTENSITY,
            start_step,
            end_step,
            cluster_count,
            scan_skip_count,
            0,
        )
        return stream if until is None else stream.until(until)

    def _multi(
        self,
        command: Command,
        start_step: int,
        end_step: int,
        cluster_count: int,
        scan_skip_count: int,
        scan_count: int,
    ) -> ScanStream:
        request = ScanRequest(
            command=command,
            start_step=start_step,
            end_step=end_step,
            cluster_count=cluster_count,
            scan_skip_count=scan_skip_count,
            scan_count=scan_count,
        )
        exchange = self._get_exchange()
        exchange.send_and_verify(request.to_command(), STATUS_OK)
        exchange.reader.read_block()
        return ScanStream(exchange, request)

    def __repr__(self) -> str:
        return f"Urg(connected={self.connected}, capture_state={self._capture_state.value})"


def _check_scan_count(scan_count: int) -> int:
    if not 1 <= scan_count <= MAX_SCAN_COUNT:
        raise ValueError(f"scan_count must be 1-{MAX_SCAN_COUNT}, got {scan_count}")
    return scan_count
