"""
FSHelper Watcher Package.

Single-shot change notification for directories and files.
Requires Python 3.11+.
"""

from fshelper.watcher.directory_watcher import DirectoryWatch
from fshelper.watcher.stat_poller import FileWatch, StatPoller

__all__ = ["DirectoryWatch", "FileWatch", "StatPoller"]
