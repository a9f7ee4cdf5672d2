"""Tests for the preview subsystem: debounced watcher and HTTP server."""

from __future__ import annotations

import time
import urllib.request
from pathlib import Path

from watchdog.events import (
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from sabresite.serve import PreviewServer, SiteWatcher
from sabresite.serve.watcher import _DebouncedHandler


def _handler(calls: list, debounce: float = 60.0, **kwargs) -> _DebouncedHandler:
    return _DebouncedHandler(
        debounce_seconds=debounce,
        callback=calls.append,
        ignore_patterns=kwargs.get("ignore_patterns", ["*.swp", "*~"]),
        ignore_dirs=[Path(d).resolve() for d in kwargs.get("ignore_dirs", [])],
        root=kwargs.get("root"),
    )


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


# ---------------------------------------------------------------------------
# _DebouncedHandler
# ---------------------------------------------------------------------------


class TestDebouncedHandler:
    def test_batches_events_until_flush(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        a, b = str(tmp_path / "a.md"), str(tmp_path / "b.md")
        handler.on_any_event(FileModifiedEvent(a))
        handler.on_any_event(FileModifiedEvent(b))
        handler.on_any_event(FileModifiedEvent(a))
        assert calls == []
        assert handler.pending == {a, b}

        handler.flush()
        assert calls == [{a, b}]
        assert handler.pending == set()

    def test_flush_without_changes_is_noop(self, tmp_path):
        calls: list[set[str]] = []
        _handler(calls).flush()
        assert calls == []

    def test_directory_events_ignored(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        handler.on_any_event(DirModifiedEvent(str(tmp_path / "dav")))
        assert handler.pending == set()

    def test_close_events_ignored(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        handler.on_any_event(FileClosedEvent(str(tmp_path / "a.md")))
        assert handler.pending == set()

    def test_move_records_both_paths(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        src, dest = str(tmp_path / "a.md.tmp"), str(tmp_path / "a.md")
        handler.on_any_event(FileMovedEvent(src, dest))
        assert handler.pending == {src, dest}
        handler.cancel()

    def test_ignores_vcs_and_editor_files(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".git" / "index")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".intro.md.swp")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "intro.md~")))
        assert handler.pending == set()

    def test_ignored_names_above_root_do_not_matter(self, tmp_path):
        calls: list[set[str]] = []
        root = (tmp_path / "node_modules" / "site").resolve()
        handler = _handler(calls, root=root)
        page = str(root / "dav" / "intro.md")
        handler.on_any_event(FileModifiedEvent(page))
        handler.on_any_event(FileModifiedEvent(str(root / ".git" / "index")))
        handler.on_any_event(FileModifiedEvent(str(root / "node_modules" / "x.js")))
        assert handler.pending == {page}
        handler.cancel()

    def test_watcher_checkout_under_ignored_name(self, tmp_path):
        calls: list[set[str]] = []
        source = tmp_path / "node_modules" / "site"
        source.mkdir(parents=True)
        watcher = SiteWatcher(source, on_change=calls.append, debounce_seconds=0.1)
        watcher.start()
        try:
            (source / "index.md").write_text("# Changed\n")
            assert _wait_for(lambda: calls)
        finally:
            watcher.stop()

    def test_ignores_output_directory(self, tmp_path):
        calls: list[set[str]] = []
        out = tmp_path / "output_dev"
        handler = _handler(calls, ignore_dirs=[out])
        handler.on_any_event(FileCreatedEvent(str(out / "index.html")))
        assert handler.pending == set()

    def test_layout_changes_count(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls)
        layout = str(tmp_path / "_layouts" / "default.html")
        handler.on_any_event(FileModifiedEvent(layout))
        assert handler.pending == {layout}
        handler.cancel()

    def test_fires_after_quiet_period(self, tmp_path):
        calls: list[set[str]] = []
        handler = _handler(calls, debounce=0.1)
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "a.md")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "b.md")))
        assert _wait_for(lambda: calls)
        assert len(calls) == 1
        assert len(calls[0]) == 2

    def test_callback_failure_does_not_propagate(self, tmp_path):
        def boom(changed):
            raise RuntimeError("render failed")

        handler = _DebouncedHandler(60.0, boom, [], [])
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "a.md")))
        handler.flush()
        assert handler.pending == set()


# ---------------------------------------------------------------------------
# SiteWatcher
# ---------------------------------------------------------------------------


class TestSiteWatcher:
    def test_start_stop(self, tmp_path):
        watcher = SiteWatcher(tmp_path, on_change=lambda changed: None)
        assert not watcher.running
        watcher.start()
        try:
            assert watcher.running
        finally:
            watcher.stop()
        assert not watcher.running

    def test_stop_without_start(self, tmp_path):
        SiteWatcher(tmp_path, on_change=lambda changed: None).stop()

    def test_detects_file_change(self, tmp_path):
        calls: list[set[str]] = []
        watcher = SiteWatcher(tmp_path, on_change=calls.append, debounce_seconds=0.1)
        watcher.start()
        try:
            (tmp_path / "index.md").write_text("# Changed\n")
            assert _wait_for(lambda: calls)
        finally:
            watcher.stop()
        assert any(path.endswith("index.md") for path in calls[0])


# ---------------------------------------------------------------------------
# PreviewServer
# ---------------------------------------------------------------------------


class TestPreviewServer:
    def test_serves_directory(self, tmp_path):
        (tmp_path / "index.html").write_text("<h1>sabre.io</h1>")
        server = PreviewServer(tmp_path, port=0)
        server.start()
        try:
            assert server.url.startswith("http://127.0.0.1:")
            assert not server.url.endswith(":0/")
            with urllib.request.urlopen(server.url, timeout=5) as resp:
                assert resp.status == 200
                assert resp.read() == b"<h1>sabre.io</h1>"
        finally:
            server.stop()

    def test_serves_rebuilt_content(self, tmp_path):
        out = tmp_path / "out"
        server = PreviewServer(out, port=0)
        server.start()
        try:
            (out / "dav" / "intro").mkdir(parents=True)
            (out / "dav" / "intro" / "index.html").write_text("v2")
            with urllib.request.urlopen(server.url + "dav/intro/", timeout=5) as resp:
                assert resp.read() == b"v2"
        finally:
            server.stop()

    def test_start_creates_directory(self, tmp_path):
        server = PreviewServer(tmp_path / "missing", port=0)
        server.start()
        server.stop()
        assert (tmp_path / "missing").is_dir()

    def test_url_before_start(self, tmp_path):
        assert PreviewServer(tmp_path, host="0.0.0.0", port=9000).url == "http://0.0.0.0:9000/"

    def test_stop_is_idempotent(self, tmp_path):
        server = PreviewServer(tmp_path, port=0)
        server.start()
        server.stop()
        server.stop()
