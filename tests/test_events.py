"""Tests for sweep events and observers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from old_files_cleanup.events import (
    CallbackObserver,
    DeleteFailed,
    ListingFailed,
    LoggingObserver,
    ObserverFailed,
    PassFailed,
    Progress,
    StatFailed,
    SweepObserver,
    describe_error,
)


class TestDescribeError:
    """Tests for error rendering."""

    def test_listing(self) -> None:
        event = ListingFailed(path=Path("/tmp/x"), error=FileNotFoundError("gone"))
        assert describe_error(event) == "Cannot list directory /tmp/x: gone"

    def test_stat(self) -> None:
        event = StatFailed(path=Path("/tmp/x/a"), error=OSError("bad"))
        assert describe_error(event) == "Cannot stat /tmp/x/a: bad"

    def test_delete(self) -> None:
        event = DeleteFailed(path=Path("/tmp/x/a"), error=PermissionError("denied"))
        assert describe_error(event) == "Cannot delete /tmp/x/a: denied"

    def test_observer(self) -> None:
        event = ObserverFailed(path=Path("/tmp/x/a"), error=RuntimeError("broke"))
        assert describe_error(event) == "on_delete callback failed for /tmp/x/a: RuntimeError('broke')"

    def test_pass_with_and_without_root(self) -> None:
        assert "in /tmp/x" in describe_error(PassFailed(path=Path("/tmp/x"), error=RuntimeError("boom")))
        assert describe_error(PassFailed(path=None, error=RuntimeError("boom"))).startswith("Sweep pass failed: ")


class TestObservers:
    """Tests for built-in observers."""

    def test_observers_satisfy_protocol(self) -> None:
        assert isinstance(LoggingObserver(), SweepObserver)
        assert isinstance(CallbackObserver(), SweepObserver)

    def test_logging_observer_logs_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        event = DeleteFailed(path=Path("/tmp/a"), error=PermissionError("denied"))

        with caplog.at_level(logging.ERROR, logger="old-files-cleanup"):
            LoggingObserver().on_error(event)

        assert "Cannot delete /tmp/a: denied" in caplog.text
        assert caplog.records[-1].exc_info is None

    @pytest.mark.parametrize(
        "event",
        [
            PassFailed(path=None, error=RuntimeError("boom")),
            ObserverFailed(path=Path("/tmp/a"), error=RuntimeError("boom")),
        ],
    )
    def test_logging_observer_attaches_traceback_for_unexpected_errors(
        self, event: PassFailed | ObserverFailed, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="old-files-cleanup"):
            LoggingObserver().on_error(event)

        assert len(caplog.records) == 1
        assert caplog.records[0].exc_info is not None
        assert caplog.records[0].exc_info[1] is event.error

    def test_callback_observer_without_on_error_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        event = StatFailed(path=Path("/tmp/a"), error=OSError("bad"))

        with caplog.at_level(logging.ERROR, logger="old-files-cleanup"):
            CallbackObserver().on_error(event)

        assert "Cannot stat /tmp/a" in caplog.text

    def test_callback_observer_dispatches(self) -> None:
        errors: list[object] = []
        deleted: list[Path] = []
        progress: list[Progress] = []
        observer = CallbackObserver(on_error=errors.append, on_delete=deleted.append, on_progress=progress.append)
        event = ListingFailed(path=Path("/tmp"), error=OSError("x"))
        tick = Progress(kind="kept", message="Keeping file", path=Path("/tmp/a"))

        observer.on_error(event)
        observer.on_delete(Path("/tmp/a"))
        observer.on_progress(tick)

        assert errors == [event]
        assert deleted == [Path("/tmp/a")]
        assert progress == [tick]

    def test_callback_observer_ignores_missing_callbacks(self) -> None:
        observer = CallbackObserver()
        observer.on_delete(Path("/tmp/a"))
        observer.on_progress(Progress(kind="deleted", message="x"))
