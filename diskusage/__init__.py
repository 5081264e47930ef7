"""Disk usage by group: recursive scan, aggregation and reporting."""

from .errors import DiskUsageError, EntryAccessError, InvalidArgument
from .models import AggregateStat, ScanOptions, GROUP_FIELDS, SORT_FIELDS
from .report import process_results, totals
from .scanner import CancelFlag, ScanObserver, scan, validate_args

__version__ = "0.1.0"

__all__ = [
    "AggregateStat",
    "CancelFlag",
    "DiskUsageError",
    "EntryAccessError",
    "GROUP_FIELDS",
    "InvalidArgument",
    "SORT_FIELDS",
    "ScanObserver",
    "ScanOptions",
    "process_results",
    "scan",
    "totals",
    "validate_args",
]
