"""Numeric encodings used inside SCIP payloads.

Measurement values are sent as groups of printable characters, each
carrying 6 bits: ``(byte - 0x30) & 0x3F``. Groups are big-endian; a
distance is 3 characters, a timestamp 4. Info fields carry plain ASCII
decimals instead.
"""

from __future__ import annotations

from .errors import MalformedField


def decode6(data: bytes) -> int:
    """Decode a group of 6-bit encoded characters.

    Total over any input: every byte is masked into range, so malformed
    input still yields a number. Callers validate lengths, not content.

    >>> decode6(b"1Dh")
    5432
    """
    res = 0
    for byte in data:
        res = (res << 6) + ((byte - 0x30) & 0x3F)
    return res


def encode6(value: int, width: int) -> bytes:
    """Encode ``value`` as ``width`` 6-bit characters.

    Raises:
        ValueError: If the value is negative or needs more than ``width``
            characters.
    """
    if value < 0 or value >= 1 << (6 * width):
        raise ValueError(f"Value {value} does not fit in {width} characters")
    out = bytearray(width)
    for i in range(width - 1, -1, -1):
        out[i] = (value & 0x3F) + 0x30
        value >>= 6
    return bytes(out)


def decode_decimal_field(data: bytes) -> int:
    """Parse an ASCII decimal numeral such as ``b"1080"``."""
    if not data or not data.isdigit():
        raise MalformedField(f"not a decimal field: {data!r}")
    return int(data)
