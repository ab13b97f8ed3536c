"""Tests for the sensor session against scripted device output."""

import pytest

from urg_mcp.models.scan import CaptureState
from urg_mcp.protocol.errors import ConnectionClosed, EchoMismatch, MalformedField, StatusMismatch
from urg_mcp.scan_stream import ScanStream
from urg_mcp.urg import Urg

from device_script import (
    TERMINATOR,
    FakeConnection,
    ack,
    echo,
    field,
    params_response,
    scan_body,
    status,
    status_response,
    version_response,
)


def _session(script: bytes, verify_checksum: bool = True) -> tuple[Urg, FakeConnection]:
    conn = FakeConnection(script)
    return Urg(conn, verify_checksum=verify_checksum), conn


def test_open_sends_nothing():
    """Opening a session sends no command."""
    urg, conn = _session(b"")
    assert conn.sent == []
    assert urg.connected
    assert urg.capture_state is CaptureState.IDLE


def test_get_version_info():
    """VV is sent bare and the reply is fully consumed."""
    urg, conn = _session(version_response())
    info = urg.get_version_info()
    assert conn.sent == ["VV"]
    assert info.vendor_info == "Hokuyo Automatic Co.,Ltd."
    assert info.serial_number == "H1234567"
    assert conn.reader.read() == b""


def test_get_sensor_params():
    """PP yields the step window and resolution."""
    urg, conn = _session(params_response())
    params = urg.get_sensor_params()
    assert conn.sent == ["PP"]
    assert params.front_dir_step == 540
    assert params.angular_resolution_deg == pytest.approx(360.0 / 1440)


def test_get_status_info():
    """II yields the laser state and timestamp."""
    urg, conn = _session(status_response(ts=77))
    info = urg.get_status_info()
    assert conn.sent == ["II"]
    assert info.time_stamp == 77
    assert info.laser_status == "ON"


def test_queries_are_not_cached():
    """Every getter performs its own exchange."""
    urg, conn = _session(params_response() + params_response())
    assert urg.get_sensor_params() == urg.get_sensor_params()
    assert conn.sent == ["PP", "PP"]


def test_get_sensor_params_with_direction_field():
    """A checked PP reply with a trailing DIRS field parses."""
    urg, conn = _session(params_response(extra=field("DIRS", "CCW")), verify_checksum=True)
    assert urg.get_sensor_params().front_dir_step == 540
    assert conn.reader.read() == b""


def test_session_usable_after_bad_params():
    """A rejected PP reply leaves the next exchange in step."""
    urg, conn = _session(params_response(ares="0") + status_response(ts=9))
    with pytest.raises(MalformedField):
        urg.get_sensor_params()
    assert urg.get_status_info().time_stamp == 9
    assert conn.sent == ["PP", "II"]


def test_echo_mismatch_interprets_no_fields():
    """A wrong echo stops before the status line."""
    urg, conn = _session(echo("PP") + status("00") + TERMINATOR)
    with pytest.raises(EchoMismatch):
        urg.get_version_info()
    assert conn.reader.read() == status("00") + TERMINATOR


def test_capture_lifecycle():
    """BM and QT toggle the capture state."""
    urg, conn = _session(ack("BM") + TERMINATOR + ack("QT") + TERMINATOR)
    urg.start_capture()
    assert urg.is_capturing
    assert urg.capture_state is CaptureState.CAPTURING
    urg.stop_capture()
    assert urg.capture_state is CaptureState.IDLE
    assert conn.sent == ["BM", "QT"]


def test_start_capture_failure_keeps_state():
    """A refused BM leaves the session idle."""
    urg, _ = _session(ack("BM", "01") + TERMINATOR)
    with pytest.raises(StatusMismatch):
        urg.start_capture()
    assert urg.capture_state is CaptureState.IDLE


def test_reboot_closes_session():
    """RB is sent twice and the session closes."""
    urg, conn = _session(ack("RB", "01") + TERMINATOR + ack("RB", "00") + TERMINATOR)
    urg.reboot()
    assert conn.sent == ["RB", "RB"]
    assert not urg.connected
    with pytest.raises(ConnectionError):
        urg.get_status_info()


def test_reboot_requires_armed_status():
    """The first RB must answer 01."""
    urg, conn = _session(ack("RB", "00") + TERMINATOR)
    with pytest.raises(StatusMismatch):
        urg.reboot()
    assert conn.sent == ["RB"]
    assert urg.connected


def test_get_distance():
    """GD returns one decoded scan."""
    distances = [5432, 0, 65, 1000]
    urg, conn = _session(ack("GD0000000300") + scan_body(42, distances))
    record = urg.get_distance(0, 3, 0)
    assert conn.sent == ["GD0000000300"]
    assert record.timestamp == 42
    assert record.distances == distances
    assert record.intensities == []


def test_get_distance_intensity():
    """GE returns distances and intensities."""
    distances = [1000, 2000]
    intensities = [300, 400]
    urg, conn = _session(ack("GE0010001101") + scan_body(1, distances, intensities))
    record = urg.get_distance_intensity(10, 11, 1)
    assert conn.sent == ["GE0010001101"]
    assert record.distances == distances
    assert record.intensities == intensities


def test_get_distance_device_hangs_up():
    """A reply cut off after the status raises ConnectionClosed."""
    urg, _ = _session(ack("GD0000108000"))
    with pytest.raises(ConnectionClosed):
        urg.get_distance(0, 1080, 0)


def test_get_distance_multi_scenario():
    """start=0, end=1080, cluster=0, skip=0, count=3."""
    distances = list(range(1081))
    script = ack("MD0000108000003") + TERMINATOR
    for rem in ("02", "01", "00"):
        script += ack("MD00001080000" + rem, "99") + scan_body(int(rem), distances)
    urg, conn = _session(script)

    stream = urg.get_distance_multi(0, 1080, 0, 0, 3)
    assert isinstance(stream, ScanStream)
    records = list(stream)

    assert conn.sent == ["MD0000108000003"]
    assert len(records) == 3
    assert [r.timestamp for r in records] == [2, 1, 0]
    assert all(len(r.distances) == 1081 for r in records)
    assert conn.reader.read() == b""


def test_get_distance_intensity_multi():
    """ME frames carry intensities."""
    script = ack("ME0000000101002") + TERMINATOR
    for rem in ("01", "00"):
        script += ack("ME00000001010" + rem, "99") + scan_body(0, [1, 2], [3, 4])
    urg, conn = _session(script)
    records = list(urg.get_distance_intensity_multi(0, 1, 1, 0, 2))
    assert conn.sent == ["ME0000000101002"]
    assert [r.intensities for r in records] == [[3, 4], [3, 4]]


def test_multi_scan_count_bounds():
    """Multi scan counts must be 1-99 and nothing is sent otherwise."""
    urg, conn = _session(b"")
    with pytest.raises(ValueError):
        urg.get_distance_multi(0, 1080, 0, 0, 0)
    with pytest.raises(ValueError):
        urg.get_distance_intensity_multi(0, 1080, 0, 0, 100)
    assert conn.sent == []


def test_get_distance_infinite_until():
    """Infinite MD stops after the record the predicate accepts."""
    script = ack("MD0000108000000") + TERMINATOR
    for ts in range(10):
        script += ack("MD0000108000000", "99") + scan_body(ts, [500, 501])
    urg, conn = _session(script)

    records = list(urg.get_distance_infinite(0, 1080, until=lambda r: r.timestamp == 4))

    assert conn.sent == ["MD0000108000000"]
    assert [r.timestamp for r in records] == [0, 1, 2, 3, 4]


def test_get_distance_intensity_infinite_without_predicate():
    """Without a predicate the caller pulls records on demand."""
    script = ack("ME0000000100000") + TERMINATOR
    for ts in range(3):
        script += ack("ME0000000100000", "99") + scan_body(ts, [7, 8], [9, 10])
    urg, _ = _session(script)

    stream = urg.get_distance_intensity_infinite(0, 1, 0, 0)
    assert isinstance(stream, ScanStream)
    assert next(stream).intensities == [9, 10]
    assert next(stream).timestamp == 1


def test_closed_session():
    """Queries on a closed session raise ConnectionError."""
    urg, _ = _session(b"")
    urg.close()
    with pytest.raises(ConnectionError):
        urg.get_version_info()


def test_context_manager_closes():
    """Leaving the with block closes the connection."""
    conn = FakeConnection(b"")
    with Urg(conn) as urg:
        assert urg.connected
    assert not conn.connected
