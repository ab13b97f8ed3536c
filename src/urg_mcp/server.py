"""MCP server entry point for URG scanning laser range finders.

Exposes tools and resources via the Model Context Protocol using the
official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .protocol.commands import (
    CLUSTER_DIGITS,
    END_STEP_DIGITS,
    SKIP_DIGITS,
    START_STEP_DIGITS,
)
from .transport.tcp_connection import DEFAULT_HOST, DEFAULT_PORT
from .urg import MAX_SCAN_COUNT, Urg

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "urg",
    instructions="MCP server for URG-series 2D scanning laser range finders",
)

# Global session state
_urg: Urg | None = None


def _get_urg() -> Urg:
    """Get the active sensor session, raising if not connected."""
    if _urg is None or not _urg.connected:
        raise RuntimeError(
            "Not connected to sensor. Use the 'connect' tool first."
        )
    return _urg


def _check_window(start_step: int, end_step: int, cluster_count: int) -> str | None:
    if not 0 <= start_step < 10 ** START_STEP_DIGITS:
        return f"start_step must be 0-{10 ** START_STEP_DIGITS - 1}"
    if not 0 <= end_step < 10 ** END_STEP_DIGITS:
        return f"end_step must be 0-{10 ** END_STEP_DIGITS - 1}"
    if start_step > end_step:
        return "start_step must not exceed end_step"
    if not 0 <= cluster_count < 10 ** CLUSTER_DIGITS:
        return f"cluster_count must be 0-{10 ** CLUSTER_DIGITS - 1}"
    return None


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> dict[str, Any]:
    """Open a TCP connection to the sensor.

    Queries the version info (VV) to confirm the device and report
    vendor, product, and firmware.

    Args:
        host: Sensor IP address (default 192.168.0.10).
        port: Sensor TCP port (default 10940).
    """
    global _urg
    if _urg is not None and _urg.connected:
        return {"connected": True, "message": "Already connected"}

    _urg = Urg.open(host, port)
    version = _urg.get_version_info()

    return {
        "connected": True,
        "host": host,
        "port": port,
        "vendor": version.vendor_info,
        "product": version.product_info,
        "firmware": version.firmware_version,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the sensor."""
    global _urg
    if _urg is None:
        return {"disconnected": True}
    _urg.close()
    _urg = None
    return {"disconnected": True}


# ─── DEVICE INFO TOOLS ───────────────────────────────────────────────

@mcp.tool()
def get_version_info() -> dict[str, Any]:
    """Retrieve vendor, product, firmware, protocol and serial number (VV)."""
    return _get_urg().get_version_info().to_dict()


@mcp.tool()
def get_sensor_params() -> dict[str, Any]:
    """Retrieve the sensor's range limits, step window and scan speed (PP)."""
    return _get_urg().get_sensor_params().to_dict()


@mcp.tool()
def get_status_info() -> dict[str, Any]:
    """Retrieve laser state, measurement mode and sensor health (II)."""
    return _get_urg().get_status_info().to_dict()


# ─── CAPTURE TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def start_capture() -> dict[str, Any]:
    """Switch the laser on (BM). Required before taking scans."""
    urg = _get_urg()
    urg.start_capture()
    return {"capture_state": urg.capture_state.value}


@mcp.tool()
def stop_capture() -> dict[str, Any]:
    """Switch the laser off (QT)."""
    urg = _get_urg()
    urg.stop_capture()
    return {"capture_state": urg.capture_state.value}


@mcp.tool()
def reboot() -> dict[str, Any]:
    """Reboot the sensor (RB). The connection is closed afterwards."""
    global _urg
    _get_urg().reboot()
    _urg = None
    return {"rebooting": True, "connected": False}


# ─── SCAN TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_distance(
    start_step: int,
    end_step: int,
    cluster_count: int = 0,
    with_intensity: bool = False,
) -> dict[str, Any]:
    """Take a single scan (GD, or GE with intensity).

    Args:
        start_step: First step of the window (see get_sensor_params).
        end_step: Last step of the window.
        cluster_count: Adjacent steps merged into one sample (0-99).
        with_intensity: Also return reflected intensity per sample.
    """
    error = _check_window(start_step, end_step, cluster_count)
    if error:
        return {"error": error}

    urg = _get_urg()
    if with_intensity:
        record = urg.get_distance_intensity(start_step, end_step, cluster_count)
    else:
        record = urg.get_distance(start_step, end_step, cluster_count)
    return record.to_dict()


@mcp.tool()
def get_distance_multi(
    start_step: int,
    end_step: int,
    scan_count: int,
    cluster_count: int = 0,
    scan_skip_count: int = 0,
    with_intensity: bool = False,
) -> dict[str, Any]:
    """Take several consecutive scans (MD, or ME with intensity).

    Args:
        start_step: First step of the window.
        end_step: Last step of the window.
        scan_count: Number of scans to take (1-99).
        cluster_count: Adjacent steps merged into one sample (0-99).
        scan_skip_count: Scans skipped between reported scans (0-9).
        with_intensity: Also return reflected intensity per sample.
    """
    error = _check_window(start_step, end_step, cluster_count)
    if error:
        return {"error": error}
    if not 1 <= scan_count <= MAX_SCAN_COUNT:
        return {"error": f"scan_count must be 1-{MAX_SCAN_COUNT}"}
    if not 0 <= scan_skip_count < 10 ** SKIP_DIGITS:
        return {"error": f"scan_skip_count must be 0-{10 ** SKIP_DIGITS - 1}"}

    urg = _get_urg()
    multi = urg.get_distance_intensity_multi if with_intensity else urg.get_distance_multi
    stream = multi(start_step, end_step, cluster_count, scan_skip_count, scan_count)
    scans = [record.to_dict() for record in stream]
    return {"scan_count": len(scans), "scans": scans}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("urg://device/version")
def resource_version() -> str:
    """Sensor identity."""
    return json.dumps(get_version_info())


@mcp.resource("urg://device/params")
def resource_params() -> str:
    """Static sensor parameters."""
    return json.dumps(get_sensor_params())


@mcp.resource("urg://device/status")
def resource_status() -> str:
    """Current sensor status."""
    return json.dumps(get_status_info())


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
