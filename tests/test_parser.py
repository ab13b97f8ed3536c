"""Tests for info field and scan block parsing."""

import io

import pytest

from urg_mcp.protocol.codec import encode6
from urg_mcp.protocol.errors import ChecksumMismatch, MalformedBlock, MalformedField
from urg_mcp.protocol.framing import LineReader
from urg_mcp.protocol.parser import (
    decode_scan_block,
    drain_fields,
    parse_sensor_params,
    parse_status_info,
    parse_version_info,
    read_scan,
    strip_tag,
)

from device_script import (
    TERMINATOR,
    data_line,
    field,
    params_response,
    scan_body,
    status_response,
    version_response,
)

# Skip the echo and status lines of the canned responses.
ACK_LINES = 2


def _after_ack(script: bytes) -> LineReader:
    reader = LineReader(io.BytesIO(script), verify_checksum=True)
    for _ in range(ACK_LINES):
        reader.read_line()
    return reader


def test_strip_tag():
    """The 5-byte tag prefix and the ';' suffix are removed."""
    assert strip_tag(b"VEND:Hokuyo;") == b"Hokuyo"
    assert strip_tag(b"DMIN:20;") == b"20"


def test_strip_tag_too_short():
    """Content shorter than tag plus suffix is malformed."""
    with pytest.raises(MalformedField):
        strip_tag(b"VEND;")


def test_parse_version_info():
    """All five VV fields are read in order."""
    reader = _after_ack(version_response())
    info = parse_version_info(reader)
    assert info.vendor_info == "Hokuyo Automatic Co.,Ltd."
    assert info.product_info == "SOKUIKI Sensor UST-10LX"
    assert info.firmware_version == "1.2.3"
    assert info.protocol_version == "SCIP 2.0"
    assert info.serial_number == "H1234567"


def test_parse_sensor_params():
    """PP fields are decoded as decimals and resolution is derived."""
    params = parse_sensor_params(_after_ack(params_response()))
    assert params.sensor_model == "UST-10LX"
    assert params.min_distance_mm == 20
    assert params.max_distance_mm == 30000
    assert params.angular_area == 1440
    assert params.angular_resolution_deg == pytest.approx(0.25)
    assert params.start_step == 0
    assert params.end_step == 1080
    assert params.front_dir_step == 540
    assert params.std_scan_speed_rpm == 2400


def test_parse_sensor_params_extra_field_checked_and_discarded():
    """A scan direction field after SCAN passes the tagged checksum rule."""
    stream = io.BytesIO(params_response(extra=field("DIRS", "CCW")))
    reader = LineReader(stream, verify_checksum=True)
    reader.read_line()
    reader.read_line()
    params = parse_sensor_params(reader)
    assert params.std_scan_speed_rpm == 2400
    assert stream.read() == b""


def test_parse_sensor_params_zero_angular_area_reads_whole_reply():
    """The reply is consumed before ARES:0 is rejected."""
    stream = io.BytesIO(params_response(ares="0") + b"next\n")
    reader = LineReader(stream)
    reader.read_line()
    reader.read_line()
    with pytest.raises(MalformedField):
        parse_sensor_params(reader)
    assert stream.read() == b"next\n"


def test_parse_sensor_params_non_numeric():
    """Numeric PP fields must be decimal."""
    script = field("MODL", "X") + field("DMIN", "twenty")
    with pytest.raises(MalformedField):
        parse_sensor_params(LineReader(io.BytesIO(script)))


def test_parse_status_info():
    """TIME is 6-bit encoded, the other fields are text or decimal."""
    info = parse_status_info(_after_ack(status_response(ts=5432)))
    assert info.sensor_model == "UST-10LX"
    assert info.laser_status == "ON"
    assert info.scanning_speed_rpm == 2400
    assert info.time_stamp == 5432
    assert info.sensor_status == "Stable 000 no error."


def test_drain_fields_rejects_untagged_checksum():
    """Leftover lines are verified as tagged fields."""
    reader = LineReader(io.BytesIO(data_line(b"DIRS:CCW;") + TERMINATOR), verify_checksum=True)
    with pytest.raises(ChecksumMismatch):
        drain_fields(reader)


def test_decode_scan_block_distance():
    """Three bytes per distance."""
    block = encode6(5432, 3) + encode6(0, 3) + encode6(1000, 3)
    record = decode_scan_block(7, block)
    assert record.timestamp == 7
    assert record.distances == [5432, 0, 1000]
    assert record.intensities == []
    assert not record.has_intensity


def test_decode_scan_block_intensity():
    """Six bytes per sample: distance then intensity."""
    block = encode6(1000, 3) + encode6(200, 3) + encode6(1010, 3) + encode6(210, 3)
    record = decode_scan_block(7, block, with_intensity=True)
    assert record.distances == [1000, 1010]
    assert record.intensities == [200, 210]
    assert len(record.distances) == len(record.intensities)


def test_decode_scan_block_bad_length():
    """Trailing partial records are rejected."""
    with pytest.raises(MalformedBlock):
        decode_scan_block(0, b"1Dh1D")
    with pytest.raises(MalformedBlock):
        decode_scan_block(0, b"1Dh1Dh1Dh", with_intensity=True)


def test_read_scan_across_lines():
    """Samples may straddle line boundaries."""
    distances = list(range(100, 160))
    reader = LineReader(io.BytesIO(scan_body(99, distances, line_size=64)), verify_checksum=True)
    record = read_scan(reader)
    assert record.timestamp == 99
    assert record.distances == distances
