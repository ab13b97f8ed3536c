"""Command codes and command line builders.

Each command is a two-letter code, optionally followed by fixed-width,
zero-padded decimal fields:

    +------+------------+----------+---------------+-----------+------------+
    | Code | Start step | End step | Cluster count | Skip scan | Scan count |
    | 2 B  | 4 digits   | 4 digits | 2 digits      | 1 digit   | 2 digits   |
    +------+------------+----------+---------------+-----------+------------+

- GD/GE take start, end and cluster
- MD/ME take all five fields
- every other command is the bare code
"""

from __future__ import annotations

from enum import Enum

START_STEP_DIGITS = 4
END_STEP_DIGITS = 4
CLUSTER_DIGITS = 2
SKIP_DIGITS = 1
SCAN_COUNT_DIGITS = 2

STATUS_OK = "00"
STATUS_REBOOT_ARMED = "01"
STATUS_CONTINUE = "99"


class Command(str, Enum):
    """SCIP 2.0 command codes."""

    VERSION = "VV"
    PARAMETERS = "PP"
    STATUS = "II"
    LASER_ON = "BM"
    LASER_OFF = "QT"
    REBOOT = "RB"
    GET_DISTANCE = "GD"
    GET_DISTANCE_INTENSITY = "GE"
    MULTI_DISTANCE = "MD"
    MULTI_DISTANCE_INTENSITY = "ME"


SINGLE_SCAN_COMMANDS = (Command.GET_DISTANCE, Command.GET_DISTANCE_INTENSITY)
MULTI_SCAN_COMMANDS = (Command.MULTI_DISTANCE, Command.MULTI_DISTANCE_INTENSITY)
INTENSITY_COMMANDS = (Command.GET_DISTANCE_INTENSITY, Command.MULTI_DISTANCE_INTENSITY)


def _field(name: str, value: int, digits: int) -> str:
    limit = 10 ** digits
    if not 0 <= value < limit:
        raise ValueError(f"{name} must be 0-{limit - 1}, got {value}")
    return f"{value:0{digits}d}"


def build_command(command: Command) -> str:
    """Build a parameterless command line (VV, PP, II, BM, QT, RB)."""
    return command.value


def build_single_scan(
    command: Command, start_step: int, end_step: int, cluster_count: int
) -> str:
    """Build a GD/GE single scan request.

    Args:
        command: GET_DISTANCE or GET_DISTANCE_INTENSITY.
        start_step: First step, 0-9999.
        end_step: Last step, 0-9999.
        cluster_count: Adjacent steps merged into one sample, 0-99.
    """
    if command not in SINGLE_SCAN_COMMANDS:
        raise ValueError(f"{command.value} is not a single scan command")
    return (
        command.value
        + _field("start_step", start_step, START_STEP_DIGITS)
        + _field("end_step", end_step, END_STEP_DIGITS)
        + _field("cluster_count", cluster_count, CLUSTER_DIGITS)
    )


def build_multi_scan(
    command: Command,
    start_step: int,
    end_step: int,
    cluster_count: int,
    scan_skip_count: int,
    scan_count: int,
) -> str:
    """Build an MD/ME multi scan request.

    The same builder produces the continuation lines the device echoes
    before each frame, where ``scan_count`` is the number of frames still
    to come after that one.

    Args:
        scan_skip_count: Scans skipped between reported scans, 0-9.
        scan_count: Number of scans, 1-99, or 0 to stream until stopped.
    """
    if command not in MULTI_SCAN_COMMANDS:
        raise ValueError(f"{command.value} is not a multi scan command")
    return (
        command.value
        + _field("start_step", start_step, START_STEP_DIGITS)
        + _field("end_step", end_step, END_STEP_DIGITS)
        + _field("cluster_count", cluster_count, CLUSTER_DIGITS)
        + _field("scan_skip_count", scan_skip_count, SKIP_DIGITS)
        + _field("scan_count", scan_count, SCAN_COUNT_DIGITS)
    )
