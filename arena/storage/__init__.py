"""
Snapshot persistence for matches.
"""

from .snapshots import SnapshotError, SnapshotStore

__all__ = [
    "SnapshotError",
    "SnapshotStore",
]
