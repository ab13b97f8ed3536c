"""Scan records and scan requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..protocol.commands import INTENSITY_COMMANDS, Command, build_multi_scan


class CaptureState(Enum):
    """Laser state as last acknowledged by the device."""

    IDLE = "idle"
    CAPTURING = "capturing"


@dataclass
class ScanRecord:
    """One decoded scan frame."""

    timestamp: int
    distances: list[int] = field(default_factory=list)
    intensities: list[int] = field(default_factory=list)

    @property
    def has_intensity(self) -> bool:
        return bool(self.intensities)

    def to_dict(self) -> dict:
        result = {
            "timestamp": self.timestamp,
            "count": len(self.distances),
            "distances": self.distances,
        }
        if self.intensities:
            result["intensities"] = self.intensities
        return result

    def __repr__(self) -> str:
        return (
            f"ScanRecord(timestamp={self.timestamp}, "
            f"samples={len(self.distances)}, "
            f"intensity={'yes' if self.intensities else 'no'})"
        )


@dataclass(frozen=True)
class ScanRequest:
    """Parameters of an MD/ME multi scan request.

    ``scan_count == 0`` streams until the caller stops pulling.
    """

    command: Command
    start_step: int
    end_step: int
    cluster_count: int = 0
    scan_skip_count: int = 0
    scan_count: int = 0

    @property
    def has_intensity(self) -> bool:
        return self.command in INTENSITY_COMMANDS

    @property
    def infinite(self) -> bool:
        return self.scan_count == 0

    def to_command(self, scan_count: int | None = None) -> str:
        """Render the command line, optionally with a different count field."""
        return build_multi_scan(
            self.command,
            self.start_step,
            self.end_step,
            self.cluster_count,
            self.scan_skip_count,
            self.scan_count if scan_count is None else scan_count,
        )
