"""Events reported by a sweep and the observers that receive them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger("old-files-cleanup")


@dataclass(frozen=True)
class ListingFailed:
    """A directory's entries could not be enumerated."""

    path: Path
    error: OSError


@dataclass(frozen=True)
class StatFailed:
    """Metadata for an entry could not be read."""

    path: Path
    error: OSError


@dataclass(frozen=True)
class DeleteFailed:
    """Unlinking a selected file failed."""

    path: Path
    error: OSError


@dataclass(frozen=True)
class PassFailed:
    """An unexpected error aborted a root directory or a whole pass."""

    path: Path | None
    error: BaseException


@dataclass(frozen=True)
class ObserverFailed:
    """The ``on_delete`` callback raised for a deleted file."""

    path: Path
    error: Exception


@dataclass(frozen=True)
class Progress:
    """Verbose progress signal.

    ``kind`` is one of ``directory_started``, ``directory_finished``,
    ``would_delete``, ``deleted``, ``kept`` or ``pass_skipped``.
    """

    kind: str
    message: str
    path: Path | None = None


ErrorEvent = ListingFailed | StatFailed | DeleteFailed | ObserverFailed | PassFailed


def describe_error(event: ErrorEvent) -> str:
    """Render an error event as a single log line."""
    if isinstance(event, ListingFailed):
        return f"Cannot list directory {event.path}: {event.error}"
    if isinstance(event, StatFailed):
        return f"Cannot stat {event.path}: {event.error}"
    if isinstance(event, DeleteFailed):
        return f"Cannot delete {event.path}: {event.error}"
    if isinstance(event, ObserverFailed):
        return f"on_delete callback failed for {event.path}: {event.error!r}"
    where = f" in {event.path}" if event.path is not None else ""
    return f"Sweep pass failed{where}: {event.error!r}"


@runtime_checkable
class SweepObserver(Protocol):
    """Receiver for everything a sweep reports."""

    def on_error(self, event: ErrorEvent) -> None:
        """Handle a recoverable failure."""
        ...

    def on_delete(self, path: Path) -> None:
        """Handle a file that was actually deleted."""
        ...

    def on_progress(self, event: Progress) -> None:
        """Handle a verbose progress event."""
        ...


class LoggingObserver:
    """Observer that writes every event to the application logger."""

    def on_error(self, event: ErrorEvent) -> None:
        exc_info = event.error if isinstance(event, ObserverFailed | PassFailed) else None
        logger.error(describe_error(event), exc_info=exc_info)

    def on_delete(self, path: Path) -> None:
        logger.debug("Deleted: %s", path)

    def on_progress(self, event: Progress) -> None:
        # Sweeper already logs progress messages
        pass


class CallbackObserver(LoggingObserver):
    """Adapts plain callables to the observer interface.

    A missing ``on_error`` callback falls back to logging, so failures are
    never dropped silently.
    """

    def __init__(
        self,
        on_error: Callable[[ErrorEvent], None] | None = None,
        on_delete: Callable[[Path], None] | None = None,
        on_progress: Callable[[Progress], None] | None = None,
    ) -> None:
        self._on_error = on_error
        self._on_delete = on_delete
        self._on_progress = on_progress

    def on_error(self, event: ErrorEvent) -> None:
        if self._on_error is None:
            super().on_error(event)
        else:
            self._on_error(event)

    def on_delete(self, path: Path) -> None:
        if self._on_delete is not None:
            self._on_delete(path)

    def on_progress(self, event: Progress) -> None:
        if self._on_progress is not None:
            self._on_progress(event)
