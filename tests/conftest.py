"""Shared fixtures for the sweep tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from old_files_cleanup.events import ErrorEvent, Progress


class RecordingObserver:
    """Observer that keeps every event for assertions."""

    def __init__(self) -> None:
        self.errors: list[ErrorEvent] = []
        self.deleted: list[Path] = []
        self.progress: list[Progress] = []

    def on_error(self, event: ErrorEvent) -> None:
        self.errors.append(event)

    def on_delete(self, path: Path) -> None:
        self.deleted.append(path)

    def on_progress(self, event: Progress) -> None:
        self.progress.append(event)

    def kinds(self, kind: str) -> list[Progress]:
        return [e for e in self.progress if e.kind == kind]


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
