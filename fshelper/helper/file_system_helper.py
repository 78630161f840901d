"""
FSHelper File System Helper.

Async-first wrapper over the OS file, directory, watch and process
primitives, with a synchronous twin for every one-shot operation.
Requires Python 3.11+.
"""

import asyncio
import json
import os
import subprocess
import threading
from collections.abc import Iterable, Sequence
from typing import Any

from fshelper.helper.futures import AbortableFuture, run_blocking
from fshelper.helper.listing import filter_extensions, filter_kinds, prefix_children
from fshelper.helper.models import DirEntry, ListingOptions, StatChange, WatchEvent
from fshelper.utils.config import get_settings
from fshelper.utils.logger import LoggerMixin
from fshelper.watcher.directory_watcher import DirectoryWatch
from fshelper.watcher.stat_poller import FileWatch

PathArg = str | os.PathLike[str] | Sequence[str]

# Background process.wait() tasks, referenced until they finish
_reapers: set[asyncio.Task[int]] = set()


def join_path(path: PathArg) -> str:
    """
    Join a path given as a string or as a sequence of segments.

    Segments are concatenated, so an absolute segment after the first
    one does not discard what precedes it (``["a", "/b"]`` is ``a/b``).
    """
    if isinstance(path, (list, tuple)):
        segments = [os.fspath(segment) for segment in path]
    else:
        segments = [os.fspath(path)]
    return _concat(segments)


def _concat(segments: Sequence[str]) -> str:
    parts = [segment for segment in segments if segment]
    if not parts:
        return "."
    return os.path.normpath(os.sep.join(parts))


def _scandir(path: str) -> list[DirEntry]:
    with os.scandir(path) as it:
        return [DirEntry.from_os_entry(entry) for entry in it]


def _write(path: str, data: str | bytes, flag: str, encoding: str) -> None:
    if isinstance(data, bytes):
        with open(path, f"{flag}b") as f:
            f.write(data)
    else:
        with open(path, flag, encoding=encoding) as f:
            f.write(data)


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def _split_lines(output: bytes) -> list[str]:
    text = output.decode("utf-8", errors="replace")
    return [line for line in text.split("\n") if line]


def _listing_options(
    accept_extensions: Iterable[str] | None,
    recursive_levels: int,
    only_files: bool,
    only_dirs: bool,
) -> ListingOptions:
    if isinstance(accept_extensions, str):
        accept_extensions = (accept_extensions,)
    return ListingOptions(
        accept_extensions=tuple(accept_extensions) if accept_extensions is not None else None,
        recursive_levels=recursive_levels,
        only_files=only_files,
        only_dirs=only_dirs,
    )


class FileSystemHelper(LoggerMixin):
    """
    File system access scoped to an optional root path.

    Every path argument is resolved against the root before it reaches
    the OS. Async methods hand their single blocking call to the event
    loop's executor; the ``*_sync`` twins run it on the calling thread.

    OS failures propagate as ``OSError`` unchanged, except for the
    existence checks, ``file_stats*`` and async ``rmdir``, which
    collapse any error into ``False``/``None``.
    """

    def __init__(self, root_path: str | os.PathLike[str] | None = None) -> None:
        """
        Initialize the helper.

        Args:
            root_path: Directory every relative path is resolved against
        """
        self._root_path = os.fspath(root_path) if root_path is not None else None
        self._encoding = get_settings().helper.encoding

    @property
    def root_path(self) -> str | None:
        return self._root_path

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root_path={self._root_path!r})"

    def resolve_path(self, path: PathArg) -> str:
        """
        Resolve a path against the root.

        An absolute argument does not replace the root; its leading
        separator is joined like any other.

        Args:
            path: A string/PathLike, or a sequence of segments to join

        Returns:
            The joined, normalised path
        """
        relative = join_path(path)
        if self._root_path:
            return _concat([self._root_path, relative])
        return relative

    # -- directories ---------------------------------------------------------

    async def mkdir(self, dir_path: PathArg) -> None:
        """Create a directory and any missing parents."""
        await run_blocking(os.makedirs, self.resolve_path(dir_path), exist_ok=True)

    def mkdir_sync(self, dir_path: PathArg) -> None:
        resolved = self.resolve_path(dir_path)
        if os.path.exists(resolved):
            return
        os.makedirs(resolved, exist_ok=True)

    async def rmdir(self, dir_path: PathArg) -> bool:
        """
        Remove an empty directory.

        Returns:
            False instead of raising when the OS refuses
        """
        resolved = self.resolve_path(dir_path)
        try:
            await run_blocking(os.rmdir, resolved)
        except OSError as e:
            self.log.debug("rmdir_failed", path=resolved, error=str(e))
            return False
        return True

    def rmdir_sync(self, dir_path: PathArg) -> None:
        os.rmdir(self.resolve_path(dir_path))

    async def dir_exists(self, dir_path: PathArg) -> bool:
        """Check whether the path can be stat'ed."""
        return await self.file_stats(dir_path) is not None

    def dir_exists_sync(self, dir_path: PathArg) -> bool:
        return self.file_stats_sync(dir_path) is not None

    # -- writing -------------------------------------------------------------

    async def write_file(
        self,
        file_path: PathArg,
        data: str | bytes,
        *,
        flag: str = "w",
        encoding: str | None = None,
    ) -> None:
        """
        Write a whole file.

        Args:
            file_path: Target file
            data: Text or bytes
            flag: "w" to truncate, "a" to append, "x" to fail if it exists
            encoding: Text encoding, defaults to the configured one
        """
        await run_blocking(
            _write, self.resolve_path(file_path), data, flag, encoding or self._encoding
        )

    def write_file_sync(
        self,
        file_path: PathArg,
        data: str | bytes,
        *,
        flag: str = "w",
        encoding: str | None = None,
    ) -> None:
        _write(self.resolve_path(file_path), data, flag, encoding or self._encoding)

    async def write_json(self, file_path: PathArg, value: Any) -> None:
        """
        Serialize a value as compact JSON and write it as UTF-8.

        Raises:
            ValueError: If the value contains NaN or infinity
            TypeError: If the value is not JSON serializable
        """
        await self.write_file(file_path, _dumps(value), encoding="utf-8")

    def write_json_sync(self, file_path: PathArg, value: Any) -> None:
        self.write_file_sync(file_path, _dumps(value), encoding="utf-8")

    async def touch(self, file_path: PathArg, *, flag: str | None = None) -> None:
        """Create the file if missing; with the default append flag existing content is kept."""
        await self.write_file(file_path, "", flag=flag or get_settings().helper.touch_flag)

    def touch_sync(self, file_path: PathArg, *, flag: str | None = None) -> None:
        self.write_file_sync(file_path, "", flag=flag or get_settings().helper.touch_flag)

    # -- reading -------------------------------------------------------------

    async def read_file(self, file_path: PathArg) -> bytes:
        return await run_blocking(_read, self.resolve_path(file_path))

    def read_file_sync(self, file_path: PathArg) -> bytes:
        return _read(self.resolve_path(file_path))

    async def read_text(self, file_path: PathArg, *, encoding: str | None = None) -> str:
        data = await self.read_file(file_path)
        return data.decode(encoding or self._encoding)

    def read_text_sync(self, file_path: PathArg, *, encoding: str | None = None) -> str:
        return self.read_file_sync(file_path).decode(encoding or self._encoding)

    async def read_json(self, file_path: PathArg) -> Any:
        """
        Read and parse a JSON file.

        Raises:
            OSError: If the file cannot be read
            json.JSONDecodeError: If the content is not valid JSON
        """
        return json.loads(await self.read_file(file_path))

    def read_json_sync(self, file_path: PathArg) -> Any:
        return json.loads(self.read_file_sync(file_path))

    # -- files ---------------------------------------------------------------

    async def file_exists(self, file_path: PathArg = ".") -> bool:
        """Check existence; any OS error counts as missing."""
        return await run_blocking(os.access, self.resolve_path(file_path), os.F_OK)

    def file_exists_sync(self, file_path: PathArg = ".") -> bool:
        return os.access(self.resolve_path(file_path), os.F_OK)

    async def file_stats(self, file_path: PathArg) -> os.stat_result | None:
        resolved = self.resolve_path(file_path)
        try:
            return await run_blocking(os.stat, resolved)
        except OSError as e:
            self.log.debug("stat_failed", path=resolved, error=str(e))
            return None

    def file_stats_sync(self, file_path: PathArg) -> os.stat_result | None:
        """Stat a path, or None on any OS error."""
        resolved = self.resolve_path(file_path)
        try:
            return os.stat(resolved)
        except OSError as e:
            self.log.debug("stat_failed", path=resolved, error=str(e))
            return None

    async def rm(self, file_path: PathArg) -> None:
        await run_blocking(os.unlink, self.resolve_path(file_path))

    def rm_sync(self, file_path: PathArg) -> None:
        os.unlink(self.resolve_path(file_path))

    # -- listing -------------------------------------------------------------

    async def read_dir(
        self,
        dir_path: PathArg = ".",
        *,
        accept_extensions: Iterable[str] | None = None,
        recursive_levels: int = 0,
        only_files: bool = False,
        only_dirs: bool = False,
    ) -> list[DirEntry]:
        """
        List a directory, optionally filtered and flattened.

        Args:
            dir_path: Directory to list
            accept_extensions: Keep only files ending in one of these
                extensions; directories always pass
            recursive_levels: How many directory levels to expand; an
                expanded directory is replaced by its children, whose
                names are prefixed with the directory name
            only_files: Drop everything but files from the result
            only_dirs: Drop everything but directories from the result

        Returns:
            Entries in OS order

        Raises:
            OSError: If any directory along the way cannot be listed
        """
        options = _listing_options(accept_extensions, recursive_levels, only_files, only_dirs)
        entries = await self._read_dir(join_path(dir_path), options)
        self.log.debug("directory_listed", path=self.resolve_path(dir_path), count=len(entries))
        return entries

    async def _read_dir(self, relative: str, options: ListingOptions) -> list[DirEntry]:
        entries = filter_extensions(
            await run_blocking(_scandir, self.resolve_path(relative)), options
        )

        if options.recursive_levels:
            expanded: list[DirEntry] = []
            for entry in entries:
                if entry.is_dir():
                    children = await self._read_dir(
                        os.path.join(relative, entry.name), options.for_children()
                    )
                    expanded.extend(prefix_children(entry, children))
                else:
                    expanded.append(entry)
            entries = expanded

        return filter_kinds(entries, options)

    def read_dir_sync(
        self,
        dir_path: PathArg = ".",
        *,
        accept_extensions: Iterable[str] | None = None,
        recursive_levels: int = 0,
        only_files: bool = False,
        only_dirs: bool = False,
    ) -> list[DirEntry]:
        options = _listing_options(accept_extensions, recursive_levels, only_files, only_dirs)
        return self._read_dir_sync(join_path(dir_path), options)

    def _read_dir_sync(self, relative: str, options: ListingOptions) -> list[DirEntry]:
        entries = filter_extensions(_scandir(self.resolve_path(relative)), options)

        if options.recursive_levels:
            expanded: list[DirEntry] = []
            for entry in entries:
                if entry.is_dir():
                    children = self._read_dir_sync(
                        os.path.join(relative, entry.name), options.for_children()
                    )
                    expanded.extend(prefix_children(entry, children))
                else:
                    expanded.append(entry)
            entries = expanded

        return filter_kinds(entries, options)

    # -- watching ------------------------------------------------------------

    def watch_dir(
        self,
        dir_path: PathArg,
        *,
        recursive: bool = False,
        persistent: bool | None = None,
    ) -> AbortableFuture[WatchEvent]:
        """
        Arm a watch that resolves with the first change in a directory.

        Must be called from a running event loop. Re-arm after each
        resolution to keep observing; changes in between are lost.

        Raises:
            OSError: If the directory cannot be watched
            RuntimeError: If no event loop is running
        """
        loop = asyncio.get_running_loop()
        settings = get_settings().watcher
        watch = DirectoryWatch(
            self.resolve_path(dir_path),
            recursive=recursive,
            persistent=settings.persistent if persistent is None else persistent,
            join_timeout=settings.join_timeout,
        )
        return AbortableFuture(future=watch.arm(loop), abort=watch.abort)

    def watch_file(
        self,
        file_path: PathArg,
        *,
        interval_ms: int | None = None,
        persistent: bool | None = None,
    ) -> AbortableFuture[StatChange]:
        """
        Arm a polling watch that resolves with the first stat change of a file.

        The result carries the new stat and the one it replaced; either
        side is None while the file does not exist.

        Raises:
            RuntimeError: If no event loop is running
            ValueError: If interval_ms is not positive
        """
        loop = asyncio.get_running_loop()
        settings = get_settings().watcher
        if interval_ms is None:
            interval_ms = settings.poll_interval_ms
        elif interval_ms < 1:
            raise ValueError(f"interval_ms must be at least 1, got {interval_ms}")

        watch = FileWatch(
            self.resolve_path(file_path),
            interval_ms=interval_ms,
            persistent=settings.persistent if persistent is None else persistent,
            join_timeout=settings.join_timeout,
        )
        return AbortableFuture(future=watch.arm(loop), abort=watch.abort)

    # -- processes -----------------------------------------------------------

    async def execute(self, command: str, args: Sequence[str] = ()) -> list[str]:
        """
        Run a command without a shell and collect its non-empty stdout lines.

        Returns as soon as stdout ends; the exit status is not checked and
        the child is reaped in the background.

        Raises:
            OSError: If the process cannot be started
        """
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        assert process.stdout is not None

        lines = _split_lines(await process.stdout.read())
        self.log.debug("process_output_closed", command=command, lines=len(lines))

        reaper = asyncio.create_task(process.wait())
        _reapers.add(reaper)
        reaper.add_done_callback(lambda task: self._log_exit(command, task))
        return lines

    def _log_exit(self, command: str, task: "asyncio.Task[int]") -> None:
        _reapers.discard(task)
        if not task.cancelled():
            self.log.debug("process_finished", command=command, returncode=task.result())

    def execute_sync(self, command: str, args: Sequence[str] = ()) -> list[str]:
        process = subprocess.Popen(
            [command, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
        assert process.stdout is not None

        with process.stdout:
            lines = _split_lines(process.stdout.read())
        self.log.debug("process_output_closed", command=command, lines=len(lines))

        def reap() -> None:
            self.log.debug("process_finished", command=command, returncode=process.wait())

        threading.Thread(target=reap, name=f"reaper:{process.pid}", daemon=True).start()
        return lines
