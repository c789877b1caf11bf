"""Tests for Config loading and BuildOptions."""

from __future__ import annotations

from pathlib import Path

import pytest

from modbuild.config import DEFAULT_RUNTIME_PATH, RUNTIME_PATH_ENV, BuildOptions, Config
from modbuild.errors import ConfigError, ConfigNotFoundError


class TestConfig:
    def test_dot_path_get(self) -> None:
        config = Config({"build": {"strict": False, "output": {"dir": "out"}}})
        assert config.get("build.strict") is False
        assert config.get("build.output.dir") == "out"
        assert config.get("build.missing", 3) == 3
        assert config.get("build.strict.deeper") is None

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "modbuild.yaml"
        path.write_text("build:\n  dev: true\n  debounce_ms: 50\n")
        config = Config.load(path)
        assert config.get("build.dev") is True
        assert config.get("build.debounce_ms") == 50

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.load(path).get("build.dev") is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError) as exc_info:
            Config.load(tmp_path / "absent.yaml")
        assert exc_info.value.details["config_path"].endswith("absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("build: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Config.load(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a YAML mapping"):
            Config.load(path)


class TestBuildOptions:
    def test_defaults(self) -> None:
        options = BuildOptions()
        assert options.output_dir == "dist"
        assert options.strict is True
        assert options.skip_checks is False
        assert options.bundle_size_warning_kb == 500
        assert options.debounce_ms == 300

    def test_from_config(self) -> None:
        config = Config({"build": {"strict": False, "dev": True, "output_dir": "build"}})
        options = BuildOptions.from_config(config)
        assert options.strict is False
        assert options.dev is True
        assert options.output_dir == "build"
        assert options.minify is True

    @pytest.mark.parametrize(
        "minify,dev,expected",
        [(True, False, True), (True, True, False), (False, False, False)],
    )
    def test_should_minify(self, minify: bool, dev: bool, expected: bool) -> None:
        assert BuildOptions(minify=minify, dev=dev).should_minify is expected


class TestRuntimePath:
    def test_explicit_option_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RUNTIME_PATH_ENV, "/env/runtime.js")
        assert BuildOptions(runtime_path="/opt/runtime.js").resolve_runtime_path() == Path("/opt/runtime.js")

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RUNTIME_PATH_ENV, "/env/runtime.js")
        assert BuildOptions().resolve_runtime_path() == Path("/env/runtime.js")

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(RUNTIME_PATH_ENV, raising=False)
        assert BuildOptions().resolve_runtime_path() == Path(DEFAULT_RUNTIME_PATH)
