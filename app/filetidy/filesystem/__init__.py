"""Filesystem enumeration.

Produces the immutable snapshots the planner works from.
"""

from filetidy.filesystem.scanner import ScanError, ScanResult, SnapshotScanner, snapshot_entry

__all__ = [
    "ScanError",
    "ScanResult",
    "SnapshotScanner",
    "snapshot_entry",
]
