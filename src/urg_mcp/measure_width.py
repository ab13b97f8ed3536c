"""Continuously measure the width of an object in front of the sensor.

Each cycle averages a batch of scans over the configured field of view,
looks for an object between ``near_mm`` and ``far_mm``, and computes its
width. A single accepted width is written to a PLC holding register when
that is enabled. Runs until interrupted with Ctrl+C.
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading

from .analysis.width import compute_width, distance_avg, distance_filter
from .config import DEFAULT_CONFIG_FILE, MeasureWidthConfig, load_config
from .models.sensor import SensorParams
from .plc import RegisterWriter
from .protocol.errors import UrgError
from .urg import Urg

logger = logging.getLogger(__name__)

FALLBACK_SCAN_COUNT = 10


def measure_once(
    urg: Urg,
    config: MeasureWidthConfig,
    params: SensorParams,
    start_step: int,
    end_step: int,
    writer: RegisterWriter | None = None,
) -> float | None:
    """Run one measurement cycle.

    Returns:
        The accepted width in mm, or None when no object, or more than
        one, falls inside the width window.
    """
    scan_count = config.scan_count_per_compute or FALLBACK_SCAN_COUNT
    records = list(urg.get_distance_multi(start_step, end_step, 0, 0, scan_count))
    time_stamp = records[-1].timestamp
    distance = distance_avg(records)

    segments = distance_filter(
        distance, config.near_mm, config.far_mm, config.min_scan_point
    )
    msg = ""
    widths = []
    for seg in segments:
        width = compute_width(
            distance,
            seg.start_index,
            seg.end_index,
            params.angular_resolution_rad,
            config.min_distance_to_fit_line_mm,
        )
        msg += (
            f" [{start_step + seg.start_index},{start_step + seg.end_index}]"
            f" ({seg.max_d},{seg.min_d},{seg.avg_d}) {width}mm;"
        )
        if config.min_width_mm < width < config.max_width_mm:
            widths.append(width)

    if not widths:
        logger.warning(
            "time_stamp:%d capture [%d,%d] not found", time_stamp, start_step, end_step
        )
        return None
    if len(widths) > 1:
        logger.warning(
            "time_stamp:%d capture [%d,%d] found more then 1.%s",
            time_stamp, start_step, end_step, msg,
        )
        return None

    logger.info(
        "time_stamp:%d capture [%d,%d] found%s use:%smm",
        time_stamp, start_step, end_step, msg, widths[0],
    )
    if writer is not None:
        writer.write_width(config.target_plc_modbus_address, widths[0])
    return widths[0]


def run(config: MeasureWidthConfig, stop: threading.Event) -> None:
    """Measure until ``stop`` is set or the sensor fails."""
    writer = None
    if config.enable_write_to_plc:
        writer = RegisterWriter(config.target_plc_ip_address, config.target_plc_port)
        writer.connect()

    try:
        with Urg.open(config.laser_ip_address, config.laser_port) as urg:
            params = urg.get_sensor_params()
            logger.info("urg parameters: %s", params)
            logger.info("urg status: %s", urg.get_status_info())

            start_step, end_step = params.steps_for_fov(config.fov_deg)
            urg.start_capture()
            logger.info(
                "urg start capture [%d,%d] with scan_count_per_compute:%d",
                start_step, end_step, config.scan_count_per_compute,
            )
            while not stop.is_set():
                try:
                    measure_once(urg, config, params, start_step, end_step, writer)
                except UrgError as e:
                    logger.error("urg get_distance failed. %s", e)
                    break
            if stop.is_set():
                logger.info("recv Ctrl + C, waiting for urg close.")

            urg.stop_capture()
            logger.info("urg status: %s", urg.get_status_info())
    finally:
        if writer is not None:
            writer.close()


def main(argv: list[str] | None = None) -> None:
    """Entry point for ``urg-measure-width``."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"TOML config file (default: {DEFAULT_CONFIG_FILE})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
    run(load_config(args.config), stop)


if __name__ == "__main__":
    main()
