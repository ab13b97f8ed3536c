"""Response parsing for info queries and scan data blocks."""

from __future__ import annotations

from ..models.scan import ScanRecord
from ..models.sensor import SensorParams, StatusInfo, VersionInfo
from .codec import decode6, decode_decimal_field
from .errors import MalformedBlock, MalformedField
from .framing import LineReader

TAG_PREFIX_SIZE = 5  # "VEND:"
TAG_SUFFIX_SIZE = 1  # ";"

DISTANCE_SIZE = 3
DISTANCE_INTENSITY_SIZE = 6


def _text(value: bytes) -> str:
    return value.decode("ascii", errors="replace")


def strip_tag(content: bytes) -> bytes:
    """Strip the ``TAG:`` prefix and ``;`` suffix of an info field line.

    ``b"VEND:Hokuyo Automatic Co.,Ltd.;"`` -> ``b"Hokuyo Automatic Co.,Ltd."``
    """
    if len(content) < TAG_PREFIX_SIZE + TAG_SUFFIX_SIZE:
        raise MalformedField(f"can not strip tag from {content!r}")
    return content[TAG_PREFIX_SIZE:-TAG_SUFFIX_SIZE]


def read_field(reader: LineReader) -> bytes:
    return strip_tag(reader.read_payload(tagged=True))


def read_text_field(reader: LineReader) -> str:
    return _text(read_field(reader))


def read_int_field(reader: LineReader) -> int:
    return decode_decimal_field(read_field(reader))


def drain_fields(reader: LineReader) -> None:
    """Discard any remaining info fields and the closing terminator."""
    reader.read_block(tagged=True)


def parse_version_info(reader: LineReader) -> VersionInfo:
    """Read the VV fields and the closing terminator."""
    info = VersionInfo(
        vendor_info=read_text_field(reader),
        product_info=read_text_field(reader),
        firmware_version=read_text_field(reader),
        protocol_version=read_text_field(reader),
        serial_number=read_text_field(reader),
    )
    drain_fields(reader)
    return info


def parse_sensor_params(reader: LineReader) -> SensorParams:
    """Read the PP fields and the closing terminator.

    The trailing scan direction field (not sent by every model) is
    discarded. The reply is read to its end before the values are checked.
    """
    params = SensorParams(
        sensor_model=read_text_field(reader),
        min_distance_mm=read_int_field(reader),
        max_distance_mm=read_int_field(reader),
        angular_area=read_int_field(reader),
        start_step=read_int_field(reader),
        end_step=read_int_field(reader),
        front_dir_step=read_int_field(reader),
        std_scan_speed_rpm=read_int_field(reader),
    )
    drain_fields(reader)
    if params.angular_area == 0:
        raise MalformedField("angular area of 0 steps")
    return params


def parse_status_info(reader: LineReader) -> StatusInfo:
    """Read the II fields and the closing terminator."""
    info = StatusInfo(
        sensor_model=read_text_field(reader),
        laser_status=read_text_field(reader),
        scanning_speed_rpm=read_int_field(reader),
        measurement_mode=read_text_field(reader),
        communication_speed=read_text_field(reader),
        time_stamp=decode6(read_field(reader)),
        sensor_status=read_text_field(reader),
    )
    drain_fields(reader)
    return info


def decode_scan_block(
    timestamp: int, block: bytes, with_intensity: bool = False
) -> ScanRecord:
    """Split a data block into 3-byte distances or 6-byte distance/intensity pairs.

    Raises:
        MalformedBlock: If the block is not a whole number of records.
    """
    width = DISTANCE_INTENSITY_SIZE if with_intensity else DISTANCE_SIZE
    if len(block) % width:
        raise MalformedBlock(
            f"block of {len(block)} bytes is not a multiple of {width}"
        )

    distances = []
    intensities = []
    for offset in range(0, len(block), width):
        distances.append(decode6(block[offset : offset + DISTANCE_SIZE]))
        if with_intensity:
            intensities.append(
                decode6(block[offset + DISTANCE_SIZE : offset + width])
            )
    return ScanRecord(timestamp=timestamp, distances=distances, intensities=intensities)


def read_scan(reader: LineReader, with_intensity: bool = False) -> ScanRecord:
    """Read the timestamp line and data block that follow a scan acknowledgement."""
    timestamp = reader.read_timestamp()
    block = reader.read_block()
    return decode_scan_block(timestamp, block, with_intensity)
