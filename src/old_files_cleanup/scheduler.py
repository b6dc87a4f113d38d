"""Repeating timer that drives sweep passes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .events import LoggingObserver, PassFailed, Progress, SweepObserver
from .sweeper import PassSummary, Sweeper

if TYPE_CHECKING:
    from .config import SweepConfig

logger = logging.getLogger("old-files-cleanup")


class Scheduler:
    """Runs a pass immediately, then every ``check_interval`` seconds.

    The configuration is validated on construction, so an invalid value
    raises before any timer or pass exists. An empty ``directory_paths``
    makes ``start()`` a silent no-op.
    """

    def __init__(self, config: SweepConfig, observer: SweepObserver | None = None) -> None:
        """Initialize the scheduler.

        Args:
            config: Sweep configuration.
            observer: Receives errors, deletions and progress events.

        Raises:
            ConfigError: If the configuration is invalid.

        """
        config.validate()
        self.config = config
        self.observer = observer if observer is not None else LoggingObserver()
        self.sweeper = Sweeper(config, self.observer)

        self._timer: asyncio.Task[None] | None = None
        self._passes: set[asyncio.Task[PassSummary | None]] = set()
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the scheduler has been started and not stopped."""
        return self._running

    @property
    def pass_in_flight(self) -> bool:
        """Whether at least one pass is currently running."""
        return bool(self._passes)

    def start(self) -> None:
        """Trigger the first pass and start the repeating timer.

        Must be called from a running event loop.
        """
        if self._running:
            return
        if not self.config.directory_paths:
            logger.debug("No directories configured, nothing to schedule")
            return

        self._running = True
        self._stop_event.clear()
        self._trigger()

        if self.config.check_interval > 0:
            self._timer = asyncio.get_running_loop().create_task(self._timer_loop())
            logger.info("Sweeping every %ss", self.config.check_interval)

    async def _timer_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.check_interval)
            self._trigger()

    def _trigger(self) -> None:
        """Start a pass unless one is running and overlap is not allowed."""
        if self._passes and not self.config.allow_overlap:
            message = "Previous pass still running, skipping this tick"
            logger.warning(message)
            self.observer.on_progress(Progress(kind="pass_skipped", message=message))
            return

        task = asyncio.get_running_loop().create_task(self._run_guarded())
        self._passes.add(task)
        task.add_done_callback(self._passes.discard)

    async def _run_guarded(self) -> PassSummary | None:
        """Run one pass, reporting anything that escapes it."""
        try:
            return await self.sweeper.run_pass(self._stop_event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.observer.on_error(PassFailed(path=None, error=e))
            return None

    async def run_once(self) -> PassSummary:
        """Run a single pass directly, without the timer.

        Returns:
            Counters for the pass; empty when no directories are configured.

        """
        if not self.config.directory_paths:
            return PassSummary()
        return await self.sweeper.run_pass(self._stop_event)

    def stop(self) -> None:
        """Cancel the timer and ask in-flight passes to finish early."""
        self._running = False
        self._stop_event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_closed(self) -> None:
        """Wait for in-flight passes to return."""
        if self._passes:
            await asyncio.gather(*self._passes, return_exceptions=True)
