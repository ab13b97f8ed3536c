"""Protocol layer: 6-bit codec, line framing, command builders, and response parsing."""

from .codec import decode6, decode_decimal_field, encode6
from .commands import Command, build_command, build_multi_scan, build_single_scan
from .exchange import CommandExchange
from .framing import Line, LineReader
