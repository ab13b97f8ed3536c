"""SCIP 2.0 client and MCP server for URG-series scanning laser range finders."""

from .urg import Urg, DEFAULT_PORT
from .scan_stream import ScanStream
from .models.scan import CaptureState, ScanRecord, ScanRequest
from .models.sensor import SensorParams, StatusInfo, VersionInfo

__version__ = "0.1.0"
