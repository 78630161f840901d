"""
FSHelper Data Models.

Value types produced by listing and watch operations.
Requires Python 3.11+.
"""

import os
from dataclasses import dataclass
from enum import Enum


class EntryKind(str, Enum):
    """Kinds of directory entries."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class DirEntry:
    """
    A single directory listing entry.

    In recursive listings the name carries the path relative to
    the listing root (e.g. ``sub/c.txt``).
    """

    name: str
    kind: EntryKind

    @classmethod
    def from_os_entry(cls, entry: os.DirEntry) -> "DirEntry":
        """Classify an os.scandir entry without following symlinks."""
        if entry.is_file(follow_symlinks=False):
            kind = EntryKind.FILE
        elif entry.is_dir(follow_symlinks=False):
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.OTHER
        return cls(name=entry.name, kind=kind)

    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class ListingOptions:
    """Options accepted by read_dir/read_dir_sync."""

    accept_extensions: tuple[str, ...] | None = None
    recursive_levels: int = 0
    only_files: bool = False
    only_dirs: bool = False

    def __post_init__(self) -> None:
        if self.recursive_levels < 0:
            raise ValueError(
                f"recursive_levels must be non-negative, got {self.recursive_levels}"
            )
        if self.accept_extensions is not None:
            # Accept both "txt" and ".txt"
            normalized = tuple(ext.lstrip(".") for ext in self.accept_extensions)
            object.__setattr__(self, "accept_extensions", normalized)

    def for_children(self) -> "ListingOptions":
        """Options for one level deeper; final kind filters apply only at the top."""
        return ListingOptions(
            accept_extensions=self.accept_extensions,
            recursive_levels=self.recursive_levels - 1,
        )


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """First change reported by a directory watch."""

    event: str  # created, deleted, modified, moved
    filename: str


@dataclass(frozen=True, slots=True)
class StatChange:
    """First change reported by a file watch; None means the file was absent."""

    current: os.stat_result | None
    previous: os.stat_result | None = None
