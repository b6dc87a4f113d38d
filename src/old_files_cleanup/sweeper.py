"""Directory traversal and deletion of old files."""

from __future__ import annotations

import asyncio
import logging
import math
import os
import stat
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .events import (
    DeleteFailed,
    ErrorEvent,
    ListingFailed,
    LoggingObserver,
    ObserverFailed,
    PassFailed,
    Progress,
    StatFailed,
    SweepObserver,
)
from .matcher import matches

if TYPE_CHECKING:
    from .config import SweepConfig

logger = logging.getLogger("old-files-cleanup")


@dataclass
class PassSummary:
    """Counters for one completed pass."""

    roots: int = 0
    files_examined: int = 0
    files_deleted: int = 0
    files_would_delete: int = 0
    errors: int = 0
    elapsed: float = 0.0
    cancelled: bool = False


def _list_directory(directory: Path) -> list[Path]:
    return sorted(directory.iterdir())


class Sweeper:
    """Walks the configured roots and deletes files that are old and selected."""

    def __init__(
        self,
        config: SweepConfig,
        observer: SweepObserver | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the sweeper.

        Args:
            config: Validated sweep configuration.
            observer: Receives errors, deletions and progress events.
            clock: Wall-clock source used for file ages.

        """
        self.config = config
        self.observer = observer if observer is not None else LoggingObserver()
        self.clock = clock

    def _progress(self, kind: str, message: str, path: Path | None = None) -> None:
        if not self.config.verbose:
            return
        logger.info(message)
        self.observer.on_progress(Progress(kind=kind, message=message, path=path))

    def _error(self, event: ErrorEvent, summary: PassSummary) -> None:
        summary.errors += 1
        self.observer.on_error(event)

    async def run_pass(self, stop_event: asyncio.Event | None = None) -> PassSummary:
        """Run one full pass over every configured root.

        Errors are reported to the observer and never raised; only
        cancellation propagates.

        Args:
            stop_event: When set, the pass returns at its next entry.

        Returns:
            Counters describing the pass.

        """
        summary = PassSummary()
        started = time.monotonic()
        now = self.clock()

        for root in self.config.directory_paths:
            if stop_event is not None and stop_event.is_set():
                summary.cancelled = True
                break
            summary.roots += 1
            try:
                await self._sweep_root(root, now, summary, stop_event)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._error(PassFailed(path=root, error=e), summary)

        summary.elapsed = time.monotonic() - started
        return summary

    async def _open_directory(self, directory: Path, summary: PassSummary) -> Iterator[Path] | None:
        """List a directory, reporting failures instead of raising."""
        self._progress("directory_started", f"Processing directory: {directory}", directory)
        try:
            entries = await asyncio.to_thread(_list_directory, directory)
        except OSError as e:
            self._error(ListingFailed(path=directory, error=e), summary)
            return None
        return iter(entries)

    async def _sweep_root(
        self,
        root: Path,
        now: float,
        summary: PassSummary,
        stop_event: asyncio.Event | None,
    ) -> None:
        """Depth-first walk of one root.

        A stack of directory iterators keeps subdirectories processed inline,
        before the next sibling, without recursion.
        """
        entries = await self._open_directory(root, summary)
        if entries is None:
            return

        stack: list[tuple[Path, Iterator[Path], float]] = [(root, entries, time.monotonic())]
        while stack:
            directory, entries, opened_at = stack[-1]
            path = next(entries, None)
            if path is None:
                stack.pop()
                elapsed_ms = round((time.monotonic() - opened_at) * 1000)
                self._progress(
                    "directory_finished",
                    f"Finished processing directory: {directory} in {elapsed_ms}ms",
                    directory,
                )
                continue

            if stop_event is not None and stop_event.is_set():
                summary.cancelled = True
                return

            try:
                st = await asyncio.to_thread(os.stat, path)
            except OSError as e:
                self._error(StatFailed(path=path, error=e), summary)
                continue

            if stat.S_ISDIR(st.st_mode):
                if self.config.recursive:
                    children = await self._open_directory(path, summary)
                    if children is not None:
                        stack.append((path, children, time.monotonic()))
                continue

            await self._consider_file(path, st.st_mtime, now, summary)

    async def _consider_file(self, path: Path, mtime: float, now: float, summary: PassSummary) -> None:
        summary.files_examined += 1
        threshold = self.config.age
        file_age = math.floor(now - mtime)
        old_enough = file_age > threshold
        selected = matches(path, self.config.include, self.config.exclude)

        if not (old_enough and selected):
            reason = "not matched" if not selected else f"age ({file_age}s <= {threshold}s)"
            self._progress("kept", f"Keeping file: {path} - {reason}", path)
            return

        if self.config.dry_run:
            summary.files_would_delete += 1
            self._progress(
                "would_delete",
                f"(dry run) Would delete file: {path} ({file_age}s > {threshold}s)",
                path,
            )
            return

        try:
            await asyncio.to_thread(path.unlink)
        except OSError as e:
            self._error(DeleteFailed(path=path, error=e), summary)
            return

        summary.files_deleted += 1
        self._progress("deleted", f"Deleted file: {path} ({file_age}s > {threshold}s)", path)
        try:
            self.observer.on_delete(path)
        except Exception as e:
            self._error(ObserverFailed(path=path, error=e), summary)
