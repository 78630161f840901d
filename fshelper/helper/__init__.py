"""
FSHelper Helper Package.

Path-scoped file system access with async and sync variants.
Requires Python 3.11+.
"""

from fshelper.helper.file_system_helper import FileSystemHelper, join_path
from fshelper.helper.futures import AbortableFuture, run_blocking
from fshelper.helper.models import (
    DirEntry,
    EntryKind,
    ListingOptions,
    StatChange,
    WatchEvent,
)

__all__ = [
    "FileSystemHelper",
    "join_path",
    "AbortableFuture",
    "run_blocking",
    "DirEntry",
    "EntryKind",
    "ListingOptions",
    "StatChange",
    "WatchEvent",
]
