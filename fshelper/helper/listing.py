"""
FSHelper Listing Filters.

Pure filtering and flattening steps used by both the sync and the
async directory listing. The OS calls themselves live in the helper.
Requires Python 3.11+.
"""

import os
from collections.abc import Iterable

from fshelper.helper.models import DirEntry, ListingOptions


def filter_extensions(entries: Iterable[DirEntry], options: ListingOptions) -> list[DirEntry]:
    """
    Drop files whose name does not end with an accepted extension.

    Anything that is not a regular file passes, so directories remain
    descendable.
    """
    if options.accept_extensions is None:
        return list(entries)

    suffixes = tuple(f".{ext}" for ext in options.accept_extensions)
    return [
        entry
        for entry in entries
        if not entry.is_file() or entry.name.endswith(suffixes)
    ]


def prefix_children(parent: DirEntry, children: Iterable[DirEntry]) -> list[DirEntry]:
    """Rewrite child names to be relative to the parent's listing root."""
    return [
        DirEntry(name=os.path.join(parent.name, child.name), kind=child.kind)
        for child in children
    ]


def filter_kinds(entries: Iterable[DirEntry], options: ListingOptions) -> list[DirEntry]:
    """Apply only_files/only_dirs over the flattened listing."""
    result = list(entries)
    if options.only_files:
        result = [entry for entry in result if entry.is_file()]
    if options.only_dirs:
        result = [entry for entry in result if entry.is_dir()]
    return result
