"""Rebuild a stylesheet whenever one of the files it touched changes."""

from __future__ import annotations

import os
import threading
import time
from typing import Callable, Iterable

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from ..errors import StyleMergeError
from ..models import BuildResult, FileRecord
from .build_service import Builder

ReadyCallback = Callable[[BuildResult, float], None]
ErrorCallback = Callable[[StyleMergeError, float], None]

_CHANGE_EVENTS = frozenset({"created", "modified", "deleted", "moved", "closed"})


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: "StyleWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            path = os.fsdecode(raw) if raw else ""
            if path and self._watcher.is_watching(path):
                logger.debug("{} {}", event.event_type, path)
                self._watcher.trigger()
                return


class StyleWatcher:
    """Keep a merged stylesheet up to date while its sources change.

    Change events only raise a pending flag; a single worker thread runs the
    builds. Events arriving during a build therefore schedule exactly one
    follow-up build, and two builds never share the cache concurrently.

    After every build (failed ones included) the watched set is replaced by
    the files the build touched, plus the URL manifest when configured.
    """

    def __init__(
        self,
        builder: Builder,
        *,
        manifest_path: str | None = None,
        use_polling: bool = False,
        on_start: Callable[[], None] | None = None,
        on_ready: ReadyCallback | None = None,
        on_error: ErrorCallback | None = None,
        observer=None,
    ) -> None:
        self.builder = builder
        self.manifest_path = os.path.abspath(manifest_path) if manifest_path else None
        self.cache: dict[str, FileRecord] = {}
        self.on_start = on_start
        self.on_ready = on_ready
        self.on_error = on_error
        self._observer = observer if observer is not None else (
            PollingObserver() if use_polling else Observer()
        )
        self._handler = _ChangeHandler(self)
        self._watched: frozenset[str] = frozenset()
        self._directory_watches: dict[str, object] = {}
        self._watch_lock = threading.Lock()
        self._condition = threading.Condition()
        self._pending = False
        self._stopped = False
        self._worker: threading.Thread | None = None

    def __enter__(self) -> "StyleWatcher":
        self.start()
        return self

    def __exit__(self, *_exc) -> None:
        self.stop()

    @property
    def watched_files(self) -> frozenset[str]:
        return self._watched

    @property
    def pending(self) -> bool:
        with self._condition:
            return self._pending

    def is_watching(self, path: str) -> bool:
        return os.path.abspath(path) in self._watched

    def watch_files(self, paths: Iterable[str]) -> None:
        """Replace the watched set with *paths* (and the manifest file)."""
        wanted = {os.path.abspath(path) for path in paths}
        if self.manifest_path:
            wanted.add(self.manifest_path)
        with self._watch_lock:
            self._watched = frozenset(wanted)
            self._sync_directories()

    def _sync_directories(self) -> None:
        directories = {os.path.dirname(path) for path in self._watched}
        for directory in set(self._directory_watches) - directories:
            self._observer.unschedule(self._directory_watches.pop(directory))
        for directory in sorted(directories - set(self._directory_watches)):
            if not os.path.isdir(directory):
                logger.debug("Skipping missing directory {}", directory)
                continue
            self._directory_watches[directory] = self._observer.schedule(
                self._handler, directory, recursive=False
            )

    def trigger(self) -> None:
        """Request a rebuild; requests made during a build collapse into one."""
        with self._condition:
            self._pending = True
            self._condition.notify()

    def run_once(self) -> BuildResult | None:
        """Run one build now and refresh the watched set."""
        if self.on_start is not None:
            self.on_start()
        started = time.perf_counter()
        try:
            result = self.builder.build(self.cache)
        except StyleMergeError as exc:
            took = (time.perf_counter() - started) * 1000
            self.watch_files(self._watched | exc.touched_files)
            logger.debug("Build failed: {}", exc)
            if self.on_error is not None:
                self.on_error(exc, took)
            return None
        took = (time.perf_counter() - started) * 1000
        self.watch_files(result.touched_files)
        if self.on_ready is not None:
            self.on_ready(result, took)
        return result

    def process_pending(self) -> int:
        """Run builds while a rebuild is pending; return how many ran."""
        builds = 0
        while True:
            with self._condition:
                if not self._pending or self._stopped:
                    return builds
                self._pending = False
            self.run_once()
            builds += 1

    def _work(self) -> None:
        while True:
            with self._condition:
                while not self._pending and not self._stopped:
                    self._condition.wait()
                if self._stopped:
                    return
            try:
                self.process_pending()
            except Exception:  # keep watching after unexpected failures
                logger.exception("Watcher build crashed")

    def start(self) -> None:
        """Start watching and schedule the initial build."""
        with self._condition:
            self._stopped = False
        if self.manifest_path:
            self.watch_files(self._watched)
        self._observer.start()
        self._worker = threading.Thread(
            target=self._work, name="stylemerge-watcher", daemon=True
        )
        self._worker.start()
        self.trigger()

    def stop(self) -> None:
        with self._condition:
            self._stopped = True
            self._condition.notify_all()
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join()
        if self._worker is not None and self._worker is not threading.current_thread():
            self._worker.join()
        self._worker = None

    def clean(self) -> None:
        self.cache = {}
