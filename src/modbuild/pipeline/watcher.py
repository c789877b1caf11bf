"""Watch mode: rebuild on source changes with a trailing-edge debounce."""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from modbuild.errors import BuildError
from modbuild.pipeline.orchestrator import BuildPipeline
from modbuild.pipeline.result import BuildResult

__all__ = ["WATCHED_SUFFIXES", "IGNORED_DIRS", "BuildWatcher", "SourceChangeHandler", "build_and_watch"]

logger = logging.getLogger(__name__)

WATCHED_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".json", ".css")
IGNORED_DIRS = frozenset({"node_modules"})


class SourceChangeHandler(FileSystemEventHandler):
    """Forwards relevant file events to a BuildWatcher."""

    def __init__(self, watcher: BuildWatcher) -> None:
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for path in paths:
            if path and self.watcher.is_relevant(os.fsdecode(path)):
                self.watcher.notify(os.fsdecode(path))
                return


class BuildWatcher:
    """Runs ``build`` after changes settle, never two builds at once.

    Every relevant change restarts the debounce timer; the build runs when
    the timer fires. A change that arrives while a build is running starts
    a new timer whose build waits for the running one to finish.

    Args:
        project_dir: Directory to observe recursively.
        build: Called for each rebuild; a BuildError it raises is logged.
        output_dir: Build output directory, whose events are ignored.
        debounce_ms: Quiet period before a rebuild.
        observer_factory: Creates the watchdog observer.
    """

    def __init__(
        self,
        project_dir: str | Path,
        build: Callable[[], Any],
        output_dir: str | Path | None = None,
        debounce_ms: int = 300,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.project_dir = Path(project_dir).resolve()
        self.build = build
        self.output_dir = Path(output_dir).resolve() if output_dir is not None else None
        self.delay = debounce_ms / 1000
        self.observer_factory = observer_factory
        self.builds = 0
        self.failures = 0
        self._observer: Any = None
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()
        self._build_lock = threading.Lock()

    @classmethod
    def for_pipeline(
        cls, pipeline: BuildPipeline, observer_factory: Callable[[], Any] = Observer
    ) -> BuildWatcher:
        return cls(
            pipeline.project_dir,
            pipeline.run,
            output_dir=pipeline.output_dir,
            debounce_ms=pipeline.options.debounce_ms,
            observer_factory=observer_factory,
        )

    def is_relevant(self, path: str | Path) -> bool:
        """True for source files outside the output, dependency and hidden directories."""
        path = Path(path).resolve()
        if path.suffix not in WATCHED_SUFFIXES:
            return False
        if self.output_dir is not None and (path == self.output_dir or self.output_dir in path.parents):
            return False
        try:
            parts = path.relative_to(self.project_dir).parts
        except ValueError:
            return False
        return not any(part in IGNORED_DIRS or part.startswith(".") for part in parts[:-1])

    def notify(self, path: str) -> None:
        """Record a change and (re)start the debounce timer."""
        logger.debug("Change detected: %s", path)
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        with self._timer_lock:
            return self._timer is not None

    def _fire(self) -> None:
        with self._timer_lock:
            self._timer = None
        self.rebuild()

    def rebuild(self) -> bool:
        """Run one build under the build lock; returns False if it failed."""
        with self._build_lock:
            logger.info("Rebuilding...")
            self.builds += 1
            try:
                self.build()
            except BuildError as e:
                self.failures += 1
                logger.error("Rebuild failed: %s", e)
                return False
            logger.info("Rebuild complete")
            return True

    def start(self) -> None:
        self._observer = self.observer_factory()
        self._observer.schedule(SourceChangeHandler(self), str(self.project_dir), recursive=True)
        self._observer.start()
        logger.info("Watching %s for changes", self.project_dir)

    def stop(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        logger.info("Stopped watching")

    def run_forever(self, poll_interval: float = 1.0) -> None:
        """Block until interrupted, then stop the observer."""
        self.start()
        try:
            while True:
                time.sleep(poll_interval)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()


def build_and_watch(
    pipeline: BuildPipeline,
    observer_factory: Callable[[], Any] = Observer,
    poll_interval: float = 1.0,
) -> BuildResult:
    """Run one build; when ``options.watch`` is set, keep rebuilding on changes until interrupted.

    A failing first build raises and nothing is watched.
    """
    result = pipeline.run()
    if pipeline.options.watch:
        BuildWatcher.for_pipeline(pipeline, observer_factory).run_forever(poll_interval)
    return result
