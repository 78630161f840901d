"""
FSHelper.

A promise-style file system helper: directory creation, whole-file
read/write, existence checks, filtered recursive listing, single-shot
watches and subprocess execution behind one async interface with
synchronous twins.
Requires Python 3.11+.
"""

from fshelper.helper import (
    AbortableFuture,
    DirEntry,
    EntryKind,
    FileSystemHelper,
    StatChange,
    WatchEvent,
)

__all__ = [
    "AbortableFuture",
    "DirEntry",
    "EntryKind",
    "FileSystemHelper",
    "StatChange",
    "WatchEvent",
]

__version__ = "0.1.0"
