"""
FSHelper Directory Watcher.

Single-shot directory change notification using watchdog.
Requires Python 3.11+.
"""

import asyncio
import os
from collections.abc import Callable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from fshelper.helper.futures import run_blocking
from fshelper.helper.models import WatchEvent
from fshelper.utils.logger import LoggerMixin

# opened/closed events are access notifications, not changes
REPORTED_EVENT_TYPES = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}
)


class FirstEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Forwards change events below a watched directory.

    Events on the watched directory itself are skipped; only its
    contents are reported, with names relative to it.
    """

    def __init__(self, root: str, on_event: Callable[[WatchEvent], None]) -> None:
        """
        Initialize the handler.

        Args:
            root: Absolute path of the watched directory
            on_event: Called from the observer thread for each change
        """
        super().__init__()
        self._root = os.path.normpath(root)
        self._on_event = on_event

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Translate a watchdog event into a WatchEvent."""
        if event.event_type not in REPORTED_EVENT_TYPES:
            return

        src_path = os.path.normpath(os.fsdecode(event.src_path))
        if src_path == self._root:
            return

        filename = os.path.relpath(src_path, self._root)
        self.log.debug("directory_change_seen", event=event.event_type, filename=filename)
        self._on_event(WatchEvent(event=event.event_type, filename=filename))


class DirectoryWatch(LoggerMixin):
    """
    One watchdog observer armed for the first change in a directory.

    The observer keeps running after the first event until abort() is
    called; later events are dropped.
    """

    def __init__(
        self,
        path: str,
        recursive: bool = False,
        persistent: bool = True,
        join_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the watch.

        Args:
            path: Directory to watch
            recursive: Whether to report changes in subdirectories
            persistent: Whether the observer thread keeps the interpreter alive
            join_timeout: Seconds to wait for the observer thread on abort
        """
        self._path = os.path.abspath(path)
        self._recursive = recursive
        self._persistent = persistent
        self._join_timeout = join_timeout
        self._observer: Observer | None = None
        self._aborted = False

    def arm(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future[WatchEvent]:
        """
        Start the observer and return the future for its first event.

        Raises:
            OSError: If the directory cannot be watched
        """
        future: asyncio.Future[WatchEvent] = loop.create_future()

        def deliver(event: WatchEvent) -> None:
            try:
                loop.call_soon_threadsafe(self._resolve, future, event)
            except RuntimeError:
                # Loop already closed, nobody is waiting any more
                self.log.debug("watch_loop_closed", path=self._path)

        observer = Observer()
        observer.daemon = not self._persistent
        observer.schedule(
            FirstEventHandler(self._path, deliver),
            self._path,
            recursive=self._recursive,
        )
        observer.start()
        self._observer = observer

        self.log.debug(
            "watch_armed",
            kind="directory",
            path=self._path,
            recursive=self._recursive,
        )
        return future

    def _resolve(self, future: asyncio.Future[WatchEvent], event: WatchEvent) -> None:
        """Runs on the loop thread, so it cannot race with abort()."""
        if self._aborted or future.done():
            return
        future.set_result(event)

    async def abort(self) -> None:
        """Stop the observer and release its OS watch handle."""
        self._aborted = True
        observer, self._observer = self._observer, None
        if observer is None:
            return

        observer.stop()
        await run_blocking(observer.join, timeout=self._join_timeout)
        self.log.debug("watch_aborted", kind="directory", path=self._path)
