"""TCP connection to an Ethernet URG sensor.

The socket is wrapped once into a buffered binary read half and a
buffered binary write half; both share the single underlying socket.
The sensor listens on port 10940 by default.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_HOST = "192.168.0.10"
DEFAULT_PORT = 10940
CONNECT_TIMEOUT_S = 5.0


@dataclass
class Endpoint:
    """Address of the connected sensor."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


class TCPConnection:
    """Manages the TCP connection to the sensor.

    Usage::

        conn = TCPConnection("192.168.0.10")
        conn.open()
        conn.writer.write(b"VV\\n")
        conn.writer.flush()
        line = conn.reader.readline()
        conn.close()

    Once open, reads block without a deadline: a silent device blocks the
    caller. Not safe for concurrent use from several threads.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        connect_timeout: float | None = CONNECT_TIMEOUT_S,
    ) -> None:
        self._endpoint = Endpoint(host=host, port=port)
        self._connect_timeout = connect_timeout
        self._sock: socket.socket | None = None
        self._reader: BinaryIO | None = None
        self._writer: BinaryIO | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def reader(self) -> BinaryIO:
        if self._reader is None:
            raise ConnectionError("Not connected to device")
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        if self._writer is None:
            raise ConnectionError("Not connected to device")
        return self._writer

    def open(self) -> Endpoint:
        """Connect to the sensor.

        Raises:
            ConnectionError: If the sensor cannot be reached.
        """
        host, port = self._endpoint.host, self._endpoint.port
        try:
            sock = socket.create_connection((host, port), timeout=self._connect_timeout)
        except OSError as e:
            raise ConnectionError(
                f"Could not connect to sensor at {host}:{port}. Last error: {e}"
            ) from e

        # The timeout only bounds the handshake; exchanges block.
        sock.settimeout(None)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")

        logger.info("Connected to sensor at %s:%d", host, port)
        return self._endpoint

    def close(self) -> None:
        """Close both halves and the socket."""
        if self._sock is None:
            return

        try:
            for half in (self._writer, self._reader):
                if half is not None:
                    half.close()
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing connection: %s", e)
        finally:
            self._sock = None
            self._reader = None
            self._writer = None
            logger.info("Disconnected")
