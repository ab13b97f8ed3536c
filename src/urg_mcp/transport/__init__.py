"""Transport layer: the TCP link to the sensor."""

from .tcp_connection import TCPConnection
