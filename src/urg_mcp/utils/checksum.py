"""SCIP line checksum.

Every response line except the command echo and the block terminator ends
with one checksum character: the sum of the covered bytes, lower 6 bits,
offset by 0x30 so that it is printable.
"""

from __future__ import annotations


def scip_checksum(data: bytes) -> int:
    """Compute the checksum character (as an int) for ``data``."""
    return (sum(data) & 0x3F) + 0x30
