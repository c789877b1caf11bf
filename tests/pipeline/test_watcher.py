"""Tests for watch-mode filtering and debounce."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from modbuild.errors import CompilationError, StructureError
from modbuild.pipeline import watcher as watcher_module
from modbuild.pipeline.watcher import BuildWatcher, SourceChangeHandler, build_and_watch


class FakeObserver:
    def __init__(self) -> None:
        self.scheduled: list[tuple[Any, str, bool]] = []
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler: Any, path: str, recursive: bool = False) -> None:
        self.scheduled.append((handler, path, recursive))

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self) -> None:
        self.joined = True


class FakeEvent:
    def __init__(self, src_path: str, dest_path: str = "", is_directory: bool = False) -> None:
        self.src_path = src_path
        self.dest_path = dest_path
        self.is_directory = is_directory


class CountingBuild:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.error = error
        self.done = threading.Event()

    def __call__(self) -> None:
        self.calls += 1
        self.done.set()
        if self.error is not None:
            raise self.error


def wait_until_idle(watcher: BuildWatcher, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while watcher.pending and time.monotonic() < deadline:
        time.sleep(0.01)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


class TestRelevance:
    @pytest.fixture
    def watcher(self, project: Path) -> BuildWatcher:
        return BuildWatcher(project, CountingBuild(), output_dir=project / "dist")

    @pytest.mark.parametrize("name", ["Module.tsx", "src/hooks/useData.ts", "styles.css", "package.json", "index.jsx"])
    def test_source_files(self, watcher: BuildWatcher, project: Path, name: str) -> None:
        assert watcher.is_relevant(project / name)

    @pytest.mark.parametrize(
        "name",
        [
            "README.md",
            "dist/bundle.js",
            "dist/manifest.json",
            "node_modules/react/index.js",
            ".git/config.json",
            "src/.cache/x.ts",
        ],
    )
    def test_ignored_files(self, watcher: BuildWatcher, project: Path, name: str) -> None:
        assert not watcher.is_relevant(project / name)

    def test_hidden_file_name_is_relevant(self, watcher: BuildWatcher, project: Path) -> None:
        assert watcher.is_relevant(project / ".eslintrc.json")

    def test_outside_project(self, watcher: BuildWatcher, tmp_path: Path) -> None:
        assert not watcher.is_relevant(tmp_path / "elsewhere" / "Module.tsx")


class TestDebounce:
    def test_burst_triggers_one_build(self, project: Path) -> None:
        build = CountingBuild()
        watcher = BuildWatcher(project, build, debounce_ms=50)
        for _ in range(5):
            watcher.notify(str(project / "Module.tsx"))
        assert build.done.wait(5.0)
        wait_until_idle(watcher)
        time.sleep(0.1)
        assert build.calls == 1
        assert watcher.builds == 1

    def test_no_build_before_quiet_period(self, project: Path) -> None:
        build = CountingBuild()
        watcher = BuildWatcher(project, build, debounce_ms=10_000)
        watcher.notify(str(project / "Module.tsx"))
        assert watcher.pending
        assert build.calls == 0
        watcher.stop()
        assert not watcher.pending

    def test_failed_rebuild_keeps_watching(self, project: Path) -> None:
        build = CountingBuild(error=CompilationError())
        watcher = BuildWatcher(project, build)
        assert watcher.rebuild() is False
        assert watcher.rebuild() is False
        assert watcher.failures == 2
        assert watcher.builds == 2

    def test_successful_rebuild(self, project: Path) -> None:
        watcher = BuildWatcher(project, CountingBuild())
        assert watcher.rebuild() is True
        assert watcher.failures == 0


class TestEvents:
    def test_handler_forwards_relevant_events(self, project: Path) -> None:
        notified: list[str] = []
        watcher = BuildWatcher(project, CountingBuild(), output_dir=project / "dist")
        watcher.notify = notified.append  # type: ignore[method-assign]
        handler = SourceChangeHandler(watcher)

        handler.on_any_event(FakeEvent(str(project / "Module.tsx")))
        handler.on_any_event(FakeEvent(str(project / "dist" / "bundle.js")))
        handler.on_any_event(FakeEvent(str(project / "src"), is_directory=True))
        handler.on_any_event(FakeEvent(str(project / "Module.tsx~"), dest_path=str(project / "Component.tsx")))

        assert notified == [str(project / "Module.tsx"), str(project / "Component.tsx")]

    def test_start_and_stop(self, project: Path) -> None:
        observer = FakeObserver()
        watcher = BuildWatcher(project, CountingBuild(), observer_factory=lambda: observer)
        watcher.start()
        handler, path, recursive = observer.scheduled[0]
        assert isinstance(handler, SourceChangeHandler)
        assert path == str(project.resolve())
        assert recursive is True
        assert observer.started

        watcher.stop()
        assert observer.stopped
        assert observer.joined

    def test_for_pipeline(self, make_project, make_pipeline) -> None:
        root = make_project()
        pipeline = make_pipeline(root, debounce_ms=120)
        watcher = BuildWatcher.for_pipeline(pipeline)
        assert watcher.delay == pytest.approx(0.12)
        assert watcher.output_dir == pipeline.output_dir
        assert not watcher.is_relevant(pipeline.output_dir / "manifest.json")


class TestBuildAndWatch:
    @pytest.fixture
    def interrupt_sleep(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _interrupt(seconds: float) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr(watcher_module, "time", SimpleNamespace(sleep=_interrupt))

    def test_single_build_without_watch(self, make_project, make_pipeline) -> None:
        observer = FakeObserver()
        result = build_and_watch(make_pipeline(make_project()), observer_factory=lambda: observer)
        assert result.manifest["id"] == 1
        assert observer.scheduled == []

    def test_watch_observes_after_first_build(self, make_project, make_pipeline, interrupt_sleep) -> None:
        observer = FakeObserver()
        root = make_project()
        result = build_and_watch(make_pipeline(root, watch=True), observer_factory=lambda: observer)
        assert result.bundle_path.exists()
        assert observer.scheduled[0][1] == str(root.resolve())
        assert observer.started
        assert observer.stopped

    def test_failed_first_build_is_not_watched(self, make_project, make_pipeline) -> None:
        observer = FakeObserver()
        root = make_project()
        (root / "package.json").unlink()
        with pytest.raises(StructureError):
            build_and_watch(make_pipeline(root, watch=True), observer_factory=lambda: observer)
        assert observer.scheduled == []
