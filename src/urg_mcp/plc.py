"""Modbus TCP output of measured widths to a PLC holding register."""

from __future__ import annotations

import logging

from pymodbus.client import ModbusTcpClient

logger = logging.getLogger(__name__)

MODBUS_PORT = 502


class RegisterWriter:
    """Writes one value at a time to PLC holding registers."""

    def __init__(self, host: str, port: int = MODBUS_PORT) -> None:
        self._host = host
        self._port = port
        self._client = ModbusTcpClient(host, port=port)

    def connect(self) -> None:
        """Open the Modbus connection.

        Raises:
            ConnectionError: If the PLC does not accept the connection.
        """
        if not self._client.connect():
            raise ConnectionError(
                f"connect to modbus server {self._host}:{self._port} failed"
            )
        logger.info("Connected to modbus server %s:%d", self._host, self._port)

    def write_width(self, address: int, width_mm: float) -> int:
        """Round ``width_mm`` and write it to holding register ``address``.

        Returns:
            The value written.

        Raises:
            ValueError: If the rounded width does not fit in 16 bits.
            IOError: If the PLC rejects the write.
        """
        value = round(width_mm)
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"width {width_mm} does not fit in a 16-bit register")
        logger.info("write width %dmm to holding register %d", value, address)
        response = self._client.write_register(address, value)
        if response.isError():
            raise IOError(f"write to holding register {address} failed: {response}")
        return value

    def close(self) -> None:
        self._client.close()
