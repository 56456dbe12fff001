"""
Filesystem watching for ``md build --watch``.

A watchdog observer feeds matching source changes into a debounced
ChangeQueue; the builder drains the queue and rebuilds.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import os
from pathlib import Path
import threading
import time

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from shirokuma_docs.md.collector import build_spec, relative_path

logger = logging.getLogger(__name__)

__all__ = ["ChangeQueue", "DocsEventHandler", "Observer"]


class ChangeQueue:
    """Debounced set of changed paths.

    ``get_ready()`` returns paths that have been quiet for
    ``debounce_seconds``; ``wait()`` blocks until something is pending.
    """

    def __init__(self, debounce_seconds: float = 0.5):
        self.debounce_seconds = debounce_seconds
        self._pending: dict[str, float] = {}  # path -> last change time
        self._lock = threading.Lock()
        self._event = threading.Event()

    def add(self, path: str) -> None:
        with self._lock:
            self._pending[path] = time.monotonic()
            self._event.set()

    def get_ready(self) -> list[str]:
        now = time.monotonic()
        with self._lock:
            ready = [p for p, ts in self._pending.items() if now - ts >= self.debounce_seconds]
            for path in ready:
                del self._pending[path]
            if not self._pending:
                self._event.clear()
            return ready

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a change is pending. False on timeout."""
        return self._event.wait(timeout)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
            self._event.clear()


class DocsEventHandler(FileSystemEventHandler):
    """Queue file events under source_dir that the build would pick up."""

    def __init__(
        self,
        source_dir: Path,
        queue: ChangeQueue,
        include: Iterable[str] = ("**/*.md",),
        exclude: Iterable[str] = (),
        output: Path | None = None,
    ):
        self.source_dir = Path(source_dir).resolve()
        self.queue = queue
        self.include_spec = build_spec(include)
        self.exclude_spec = build_spec(exclude)
        self.output = Path(output).resolve() if output else None

    def is_relevant(self, path: Path) -> bool:
        path = path.resolve()
        if self.output is not None and path == self.output:
            return False
        try:
            path.relative_to(self.source_dir)
        except ValueError:
            return False
        rel = relative_path(path, self.source_dir)
        return self.include_spec.match_file(rel) and not self.exclude_spec.match_file(rel)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        paths = [event.src_path]
        # Moves count for both ends so renames in and out trigger a rebuild
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(dest)
        for raw in paths:
            path = Path(os.fsdecode(raw))
            if self.is_relevant(path):
                logger.debug(f"{event.event_type}: {path}")
                self.queue.add(str(path))
