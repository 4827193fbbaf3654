"""Concurrent TCP reachability and banner-grab scanner."""

from .models import NO_RESPONSE, ScanConfig, ScanReport, ScanResult, ScanTask
from .scanner import scan

__all__ = [
    "NO_RESPONSE",
    "ScanConfig",
    "ScanReport",
    "ScanResult",
    "ScanTask",
    "scan",
]

__version__ = "0.1.0"
