"""Device identity, parameter, and status records (VV, PP and II responses)."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class VersionInfo:
    """Parsed VV response."""

    vendor_info: str
    product_info: str
    firmware_version: str
    protocol_version: str
    serial_number: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SensorParams:
    """Parsed PP response.

    ``angular_area`` is the number of steps in a full revolution; the
    angular resolution is derived from it.
    """

    sensor_model: str
    min_distance_mm: int
    max_distance_mm: int
    angular_area: int
    start_step: int
    end_step: int
    front_dir_step: int
    std_scan_speed_rpm: int

    @property
    def angular_resolution_deg(self) -> float:
        return 360.0 / self.angular_area

    @property
    def angular_resolution_rad(self) -> float:
        return math.radians(self.angular_resolution_deg)

    def steps_for_fov(self, fov_deg: float) -> tuple[int, int]:
        """Start and end step of a window of ``fov_deg`` centred on the front."""
        half = int((fov_deg * 0.5) / self.angular_resolution_deg)
        return self.front_dir_step - half, self.front_dir_step + half

    def to_dict(self) -> dict:
        result = asdict(self)
        result["angular_resolution_deg"] = self.angular_resolution_deg
        return result


@dataclass(frozen=True)
class StatusInfo:
    """Parsed II response."""

    sensor_model: str
    laser_status: str
    scanning_speed_rpm: int
    measurement_mode: str
    communication_speed: str
    time_stamp: int
    sensor_status: str

    def to_dict(self) -> dict:
        return asdict(self)
