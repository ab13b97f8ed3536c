"""Data models for sensor info records and scans."""

from .scan import CaptureState, ScanRecord, ScanRequest
from .sensor import SensorParams, StatusInfo, VersionInfo
