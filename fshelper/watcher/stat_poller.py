"""
FSHelper Stat Poller.

Polling-based single-shot file watching.
Requires Python 3.11+.
"""

import asyncio
import os
import threading
from collections.abc import Callable

from fshelper.helper.futures import run_blocking
from fshelper.helper.models import StatChange
from fshelper.utils.logger import LoggerMixin


def safe_stat(path: str) -> os.stat_result | None:
    """Stat a path, returning None while it is absent or unreadable."""
    try:
        return os.stat(path)
    except OSError:
        return None


def stat_signature(stat: os.stat_result | None) -> tuple[int, ...] | None:
    """Fields compared between polls."""
    if stat is None:
        return None
    return (stat.st_ino, stat.st_size, stat.st_mode, stat.st_mtime_ns)


class StatPoller(threading.Thread, LoggerMixin):
    """
    Re-stats a path on a fixed interval and reports differences.

    Each detected change is passed to the callback together with
    the stat it replaced. Polling continues until stop() is called.
    """

    def __init__(
        self,
        path: str,
        interval: float,
        baseline: os.stat_result | None,
        on_change: Callable[[StatChange], None],
        persistent: bool = True,
    ) -> None:
        """
        Initialize the poller.

        Args:
            path: File to poll
            interval: Seconds between polls
            baseline: Stat taken when the watch was armed
            on_change: Called from the poller thread on each change
            persistent: Whether the thread keeps the interpreter alive
        """
        super().__init__(name=f"stat-poller:{path}", daemon=not persistent)
        self._path = path
        self._interval = interval
        self._baseline = baseline
        self._on_change = on_change
        self._stop_requested = threading.Event()

    def run(self) -> None:
        previous = self._baseline
        while not self._stop_requested.wait(self._interval):
            current = safe_stat(self._path)
            if stat_signature(current) != stat_signature(previous):
                self._on_change(StatChange(current=current, previous=previous))
                previous = current

    def stop(self) -> None:
        """Ask the thread to exit after its current wait."""
        self._stop_requested.set()


class FileWatch(LoggerMixin):
    """One stat poller armed for the first change of a file."""

    def __init__(
        self,
        path: str,
        interval_ms: int,
        persistent: bool = True,
        join_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the watch.

        Args:
            path: File to watch; it does not need to exist yet
            interval_ms: Polling interval in milliseconds
            persistent: Whether the poller thread keeps the interpreter alive
            join_timeout: Seconds to wait for the poller thread on abort
        """
        self._path = path
        self._interval = interval_ms / 1000.0
        self._persistent = persistent
        self._join_timeout = join_timeout
        self._poller: StatPoller | None = None
        self._aborted = False

    def arm(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future[StatChange]:
        """Take the baseline stat, start polling and return the future for the first change."""
        future: asyncio.Future[StatChange] = loop.create_future()

        def deliver(change: StatChange) -> None:
            try:
                loop.call_soon_threadsafe(self._resolve, future, change)
            except RuntimeError:
                self.log.debug("watch_loop_closed", path=self._path)

        poller = StatPoller(
            self._path,
            interval=self._interval,
            baseline=safe_stat(self._path),
            on_change=deliver,
            persistent=self._persistent,
        )
        poller.start()
        self._poller = poller

        self.log.debug(
            "watch_armed",
            kind="file",
            path=self._path,
            interval=self._interval,
        )
        return future

    def _resolve(self, future: asyncio.Future[StatChange], change: StatChange) -> None:
        if self._aborted or future.done():
            return
        future.set_result(change)

    async def abort(self) -> None:
        """Stop polling; returns once the poller thread has exited."""
        self._aborted = True
        poller, self._poller = self._poller, None
        if poller is None:
            return

        poller.stop()
        await run_blocking(poller.join, timeout=self._join_timeout)
        self.log.debug("watch_aborted", kind="file", path=self._path)
