"""Long-running daemon around the sweep scheduler."""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .events import ErrorEvent, LoggingObserver, Progress, SweepObserver
from .scheduler import Scheduler
from .sweeper import PassSummary

if TYPE_CHECKING:
    from .config import SweepConfig


@dataclass
class DaemonStats:
    """Statistics for the daemon."""

    start_time: datetime
    passes_skipped: int = 0
    files_deleted: int = 0
    errors: int = 0


class StatsObserver(LoggingObserver):
    """Logs events and counts them, forwarding to an optional observer."""

    def __init__(self, stats: DaemonStats, forward: SweepObserver | None = None) -> None:
        self.stats = stats
        self.forward = forward

    def on_error(self, event: ErrorEvent) -> None:
        self.stats.errors += 1
        super().on_error(event)
        if self.forward is not None:
            self.forward.on_error(event)

    def on_delete(self, path: Path) -> None:
        self.stats.files_deleted += 1
        super().on_delete(path)
        if self.forward is not None:
            self.forward.on_delete(path)

    def on_progress(self, event: Progress) -> None:
        if event.kind == "pass_skipped":
            self.stats.passes_skipped += 1
        if self.forward is not None:
            self.forward.on_progress(event)


class SweepDaemon:
    """Main daemon for deleting old files on a schedule."""

    def __init__(self, config: SweepConfig, observer: SweepObserver | None = None) -> None:
        """Initialize the daemon.

        Args:
            config: Sweep configuration.
            observer: Extra observer notified after the daemon's own bookkeeping.

        Raises:
            ConfigError: If the configuration is invalid.

        """
        config.validate()
        self.config = config
        self.logger = self._setup_logging()

        self.stats = DaemonStats(start_time=datetime.now())
        self.observer = StatsObserver(self.stats, observer)
        self.scheduler = Scheduler(config, self.observer)
        self._stopped: asyncio.Event | None = None

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the daemon.

        Returns:
            Configured logger instance.

        """
        logger = logging.getLogger("old-files-cleanup")
        logger.setLevel(self.config.log_level_value)

        # Clear existing handlers to avoid duplicates if daemon is recreated
        if logger.handlers:
            logger.handlers.clear()

        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
        )
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)

        self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(self.config.log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        )
        logger.addHandler(file_handler)

        return logger

    async def run_once(self) -> PassSummary:
        """Run a single sweep pass.

        Returns:
            Counters for the pass.

        """
        mode = " (dry run)" if self.config.dry_run else ""
        self.logger.info("Starting single sweep pass%s...", mode)
        summary = await self.scheduler.run_once()
        self.logger.info(
            "Pass finished in %.2fs: examined=%d, deleted=%d, would_delete=%d, errors=%d",
            summary.elapsed,
            summary.files_examined,
            summary.files_deleted,
            summary.files_would_delete,
            summary.errors,
        )
        return summary

    async def run_daemon(self) -> None:
        """Run the daemon until stopped or signalled."""
        if not self.config.directory_paths:
            self.logger.warning("No directories configured, nothing to do")
            return

        self._stopped = asyncio.Event()
        self.logger.info("Starting old files cleanup daemon...")

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_shutdown)

        try:
            self.scheduler.start()
            if self.config.check_interval <= 0:
                # Single pass mode: stop once the initial pass returns
                await self.scheduler.wait_closed()
                self._stopped.set()
            await self._stopped.wait()
        except asyncio.CancelledError:
            self.logger.info("Daemon cancelled")
            raise
        finally:
            self.scheduler.stop()
            await self.scheduler.wait_closed()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.remove_signal_handler(sig)
            self.logger.info(
                "Daemon stopped. Stats: deleted=%d, skipped_passes=%d, errors=%d",
                self.stats.files_deleted,
                self.stats.passes_skipped,
                self.stats.errors,
            )

    def _handle_shutdown(self) -> None:
        """Handle shutdown signal."""
        self.logger.info("Shutdown signal received")
        self.stop()

    def stop(self) -> None:
        """Stop the daemon."""
        self.scheduler.stop()
        if self._stopped is not None:
            self._stopped.set()
