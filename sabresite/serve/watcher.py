"""File watcher that batches content changes and triggers a rebuild."""

from __future__ import annotations

import fnmatch
import logging
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

# Directories never worth a rebuild
_IGNORE_PARTS = {".git", ".hg", ".svn", "node_modules", "__pycache__"}


class _DebouncedHandler(FileSystemEventHandler):
    """Collects changed paths and fires the callback once after a quiet period."""

    def __init__(
        self,
        debounce_seconds: float,
        callback: Callable[[set[str]], None],
        ignore_patterns: list[str],
        ignore_dirs: list[Path],
        root: Path | None = None,
    ) -> None:
        super().__init__()
        self._root = root
        self._debounce = debounce_seconds
        self._callback = callback
        self._ignore_patterns = ignore_patterns
        self._ignore_dirs = ignore_dirs
        self._lock = threading.Lock()
        self._pending: set[str] = set()
        self._timer: threading.Timer | None = None

    @property
    def pending(self) -> set[str]:
        with self._lock:
            return set(self._pending)

    def should_ignore(self, path: str) -> bool:
        p = Path(path)
        resolved = p.resolve()
        # only components below the watched root count
        if self._root is not None and resolved.is_relative_to(self._root):
            parts = resolved.relative_to(self._root).parts
        else:
            parts = p.parts
        if any(part in _IGNORE_PARTS for part in parts):
            return True
        if any(fnmatch.fnmatch(p.name, pat) for pat in self._ignore_patterns):
            return True
        return any(resolved.is_relative_to(d) for d in self._ignore_dirs)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        relevant = {str(p) for p in paths if p and not self.should_ignore(str(p))}
        if not relevant:
            return

        with self._lock:
            self._pending.update(relevant)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Hand the batched paths to the callback now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            changed = set(self._pending)
            self._pending.clear()
        if not changed:
            return
        try:
            self._callback(changed)
        except Exception:
            logger.exception("Rebuild callback failed for %d change(s)", len(changed))

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class SiteWatcher:
    """Watches the content root and calls *on_change* with each batch of changes.

    Uses watchdog with a trailing debounce window so an editor's save
    pattern (temp file + rename) produces one rebuild. Layout edits under
    ``_layouts`` count as changes; anything inside *ignore_dirs* (the build
    output) does not.
    """

    def __init__(
        self,
        source_dir: str | Path,
        on_change: Callable[[set[str]], None],
        debounce_seconds: float = 0.5,
        ignore_patterns: list[str] | None = None,
        ignore_dirs: list[str | Path] | None = None,
    ) -> None:
        self._source_dir = Path(source_dir).resolve()
        self._observer: Observer | None = None
        self._handler = _DebouncedHandler(
            debounce_seconds=debounce_seconds,
            callback=on_change,
            ignore_patterns=list(ignore_patterns or []),
            ignore_dirs=[Path(d).resolve() for d in ignore_dirs or []],
            root=self._source_dir,
        )

    @property
    def pending(self) -> set[str]:
        """Paths changed since the last rebuild was triggered."""
        return self._handler.pending

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Begin watching the content root recursively."""
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._source_dir), recursive=True)
        self._observer.start()
        logger.info("Watching %s for changes", self._source_dir)

    def stop(self) -> None:
        """Stop watching and drop any pending batch."""
        self._handler.cancel()
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self._source_dir)
