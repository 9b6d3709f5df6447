"""
Refresh-on-change watching of an artifact tree.

File events are collected per path and debounced: once the tree has been
quiet for DEBOUNCE_SECONDS the callback fires once with every changed
path, so an editor save cycle or a multi-file checkout costs one reload.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[list[Path]], None]


class ArtifactTreeHandler(FileSystemEventHandler):
    """Collects changed artifact files and reports them in debounced batches."""

    DEBOUNCE_SECONDS = 1.0
    IGNORED_SUFFIXES = {".tmp", ".swp"}

    def __init__(self, root: Path, on_change: ChangeCallback, clock: Callable[[], float] = time.time):
        super().__init__()
        self.root = Path(root)
        self.on_change = on_change
        self._clock = clock
        # path -> time of the latest event for it
        self.pending: dict[str, float] = {}

    def _is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.relative_to(self.root)
        except ValueError:
            rel = p
        # Skip hidden files and directories (.git, atomic-write temp files)
        if any(part.startswith(".") for part in rel.parts):
            return False
        return p.suffix.lower() not in self.IGNORED_SUFFIXES

    def _touch(self, path: str) -> None:
        if self._is_relevant(path):
            self.pending[path] = self._clock()

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        # A deleted artifact directory changes the tree too
        self._touch(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        self._touch(event.src_path)
        self._touch(event.dest_path)

    def flush_pending(self) -> list[Path]:
        """Fire the callback if every pending change is past the debounce window."""
        if not self.pending:
            return []
        now = self._clock()
        if now - max(self.pending.values()) < self.DEBOUNCE_SECONDS:
            return []

        changed = sorted(Path(p) for p in self.pending)
        self.pending.clear()
        logger.info("%d artifact file(s) changed", len(changed))
        self.on_change(changed)
        return changed


def watch_artifacts(root: Path, on_change: ChangeCallback, recursive: bool = True) -> tuple[Observer, ArtifactTreeHandler]:
    """
    Start watching an artifact tree.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ArtifactTreeHandler(root, on_change)
    observer = Observer()
    observer.schedule(handler, str(root), recursive=recursive)
    observer.start()
    return observer, handler


def run_watch_loop(root: Path, on_change: ChangeCallback) -> None:
    """Block, flushing debounced changes, until interrupted."""
    observer, handler = watch_artifacts(root, on_change)
    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
