"""Object width from averaged scans.

The object is the run of samples that falls inside a distance window.
Its face is fitted with a straight line; the width is the distance
between the points where the first and last rays that still touch that
line intersect it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike

from ..models.scan import ScanRecord

logger = logging.getLogger(__name__)

# Fraction of points dropped at each end of a segment before fitting.
FIT_TRIM = 0.2


@dataclass(frozen=True)
class Segment:
    """A contiguous run of in-window samples."""

    start_index: int
    end_index: int  # inclusive
    max_d: int
    min_d: int
    avg_d: int

    @property
    def count(self) -> int:
        return self.end_index - self.start_index + 1


def distance_avg(records: Sequence[ScanRecord]) -> np.ndarray:
    """Per-step mean distance over several scans of the same window."""
    if not records:
        raise ValueError("need at least one scan to average")
    return np.asarray([r.distances for r in records], dtype=np.float64).mean(axis=0)


def distance_filter(
    distance: ArrayLike, near: float, far: float, min_scan_point: int
) -> list[Segment]:
    """Find runs of samples inside ``[near, far]`` longer than ``min_scan_point``.

    A run is only reported once an out-of-window sample closes it; a run
    still open at the end of the scan is dropped.
    """
    segments: list[Segment] = []
    start = None
    values: list[float] = []
    for i, d in enumerate(np.asarray(distance, dtype=np.float64)):
        inside = near <= d <= far
        if start is None:
            if inside:
                start = i
                values = [d]
            continue
        if inside:
            values.append(d)
            continue
        if i - start > min_scan_point:
            segments.append(
                Segment(
                    start_index=start,
                    end_index=i - 1,
                    max_d=int(max(values)),
                    min_d=int(min(values)),
                    avg_d=int(sum(values)) // (i - start),
                )
            )
        start = None
    return segments


def line_fit_ols(x: ArrayLike, y: ArrayLike) -> tuple[float, float]:
    """Least-squares fit of ``y = a * x + b``."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"x and y differ in shape: {x.shape} != {y.shape}")
    design = np.column_stack([x, np.ones_like(x)])
    a, b = np.linalg.solve(design.T @ design, design.T @ y)
    return float(a), float(b)


def compute_width(
    distance: ArrayLike,
    start_index: int,
    end_index: int,
    angular_resolution_rad: float,
    min_distance_from_fit_line: float,
) -> float:
    """Width in mm of the object spanning ``distance[start_index:end_index + 1]``.

    Angles are taken relative to the segment start and offset by 90
    degrees so that the object faces the +y axis.
    """
    d = np.asarray(distance, dtype=np.float64)[start_index : end_index + 1]
    theta = np.arange(len(d)) * angular_resolution_rad + math.pi / 2
    x = d * np.cos(theta)
    y = d * np.sin(theta)

    head = int(len(x) * FIT_TRIM)
    tail = len(x) - head
    a, b = line_fit_ols(x[head:tail], y[head:tail])
    logger.info("ols fit line (%s,%s)", a, b)

    residual = np.abs(x * a - y + b) / math.sqrt(a * a + 1.0)
    close = np.flatnonzero(residual < min_distance_from_fit_line)
    head_index = int(close[0]) if close.size else 0
    tail_index = int(close[-1]) if close.size else 0
    logger.info(
        "[%d,%d] cut [%d,%d]", 0, end_index - start_index, head_index, tail_index
    )

    ax, ay = _ray_intersection(head_index * angular_resolution_rad + math.pi / 2, a, b)
    bx, by = _ray_intersection(tail_index * angular_resolution_rad + math.pi / 2, a, b)
    return math.hypot(bx - ax, by - ay)


def _ray_intersection(theta: float, a: float, b: float) -> tuple[float, float]:
    """Intersection of the ray at angle ``theta`` with ``y = a * x + b``."""
    t = math.tan(theta)
    return b / (t - a), b * t / (t - a)
