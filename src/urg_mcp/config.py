"""Configuration for the width measurement tool.

Read from a flat TOML file; every key is optional::

    laser_ip_address = "192.168.0.10"
    laser_port = 10940
    enable_write_to_plc = true
    target_plc_ip_address = "10.0.0.5"
    target_plc_modbus_address = 12
    near_mm = 300
    far_mm = 600

When the file can not be loaded the defaults are used and written back to
it, so the next run starts from an editable file.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import tomli_w

from .urg import MAX_SCAN_COUNT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "measure_width.toml"

# Inclusive bounds for numeric keys.
VALUE_RANGES = {
    "laser_port": (1, 0xFFFF),
    "target_plc_port": (1, 0xFFFF),
    "target_plc_modbus_address": (0, 0xFFFF),
    "fov_deg": (1, 360),
    "scan_count_per_compute": (0, MAX_SCAN_COUNT),
}


@dataclass
class MeasureWidthConfig:
    """Settings for one sensor feeding one PLC register."""

    laser_ip_address: str = "192.168.0.10"
    laser_port: int = 10940
    target_plc_ip_address: str = "127.0.0.1"
    target_plc_port: int = 502
    target_plc_modbus_address: int = 0
    enable_write_to_plc: bool = False
    near_mm: int = 300
    far_mm: int = 600
    fov_deg: int = 30
    min_scan_point: int = 10
    scan_count_per_compute: int = 40
    min_distance_to_fit_line_mm: int = 45
    min_width_mm: int = 80
    max_width_mm: int = 300

    @classmethod
    def from_dict(cls, data: dict) -> MeasureWidthConfig:
        """Build a config from parsed TOML.

        Raises:
            ValueError: On an unknown key, a value of the wrong type, or a
                number outside its allowed range.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")

        defaults = cls()
        for key, value in data.items():
            expected = type(getattr(defaults, key))
            # bool is an int subclass; keep the two apart.
            if type(value) is not expected:
                raise ValueError(
                    f"{key} must be {expected.__name__}, got {type(value).__name__}"
                )
            if key in VALUE_RANGES:
                low, high = VALUE_RANGES[key]
                if not low <= value <= high:
                    raise ValueError(f"{key} must be {low}-{high}, got {value}")
        return cls(**data)


def save_config(config: MeasureWidthConfig, path: str | Path) -> None:
    """Write ``config`` as TOML."""
    with Path(path).open("wb") as f:
        tomli_w.dump(asdict(config), f)


def load_config(path: str | Path = DEFAULT_CONFIG_FILE) -> MeasureWidthConfig:
    """Load the config file, falling back to defaults on any problem.

    The defaults are then saved to ``path``; a failed save is only logged.
    """
    config_file = Path(path)
    try:
        with config_file.open("rb") as f:
            return MeasureWidthConfig.from_dict(tomllib.load(f))
    except FileNotFoundError:
        err_msg = f'config file "{config_file}" not found!'
    except OSError as e:
        err_msg = f"read config file failed. {e}"
    except (tomllib.TOMLDecodeError, ValueError) as e:
        err_msg = f"deserialize config {config_file} failed. {e}"

    default_config = MeasureWidthConfig()
    logger.warning("%s, use default value. %s", err_msg, default_config)
    try:
        save_config(default_config, config_file)
    except OSError as e:
        logger.warning("save default config failed. %s", e)
    return default_config
