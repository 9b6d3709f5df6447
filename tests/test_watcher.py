"""Tests for debounced change detection."""

from __future__ import annotations

from pathlib import Path

from watchdog.events import FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from tokentax.watcher import ArtifactTreeHandler


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_debounce_batches_changes(tmp_path: Path):
    clock = Clock()
    batches = []
    handler = ArtifactTreeHandler(tmp_path, batches.append, clock=clock)

    handler.on_modified(FileModifiedEvent(str(tmp_path / "base" / "f" / "f.json")))
    clock.now += 0.5
    handler.on_modified(FileModifiedEvent(str(tmp_path / "base" / "f" / "f.md")))
    assert handler.flush_pending() == []

    clock.now += 1.0
    changed = handler.flush_pending()
    assert changed == [tmp_path / "base" / "f" / "f.json", tmp_path / "base" / "f" / "f.md"]
    assert batches == [changed]
    assert handler.flush_pending() == []


def test_hidden_and_temp_files_ignored(tmp_path: Path):
    handler = ArtifactTreeHandler(tmp_path, lambda paths: None)
    handler.on_modified(FileModifiedEvent(str(tmp_path / "base" / "f" / ".f.json.tmp")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / ".git" / "index")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "base" / "f" / "f.swp")))
    assert handler.pending == {}


def test_moves_and_deletes_tracked(tmp_path: Path):
    handler = ArtifactTreeHandler(tmp_path, lambda paths: None)
    handler.on_deleted(FileDeletedEvent(str(tmp_path / "behaviors" / "old")))
    handler.on_moved(FileMovedEvent(str(tmp_path / "a.json"), str(tmp_path / "b.json")))
    assert set(handler.pending) == {
        str(tmp_path / "behaviors" / "old"),
        str(tmp_path / "a.json"),
        str(tmp_path / "b.json"),
    }
