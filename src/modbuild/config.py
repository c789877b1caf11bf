"""Configuration loading and build options."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from modbuild.errors import ConfigError, ConfigNotFoundError

__all__ = ["Config", "BuildOptions", "DEFAULT_RUNTIME_PATH", "RUNTIME_PATH_ENV"]

DEFAULT_RUNTIME_PATH = "/usr/local/share/modbuild/templates/runtime.js"
RUNTIME_PATH_ENV = "MODBUILD_RUNTIME_PATH"


class Config:
    """Configuration accessor with dot-path key support."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigNotFoundError(config_path=str(path))

        content = path.read_text(encoding="utf-8")
        try:
            parsed = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(message=f"Invalid YAML in config file: {path}") from e

        if parsed is None:
            return cls({})
        if not isinstance(parsed, dict):
            raise ConfigError(message=f"Config file must be a YAML mapping: {path}")
        return cls(parsed)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


@dataclass(frozen=True)
class BuildOptions:
    """Options for a single build invocation.

    Attributes:
        output_dir: Directory that receives the bundle and manifest.
        minify: Ask the compiler to minify (ignored in dev mode).
        dev: Development build: no minification, source map emitted.
        watch: Rebuild on file changes after the first build (used by ``build_and_watch``).
        strict: Promote capability and optional-stage warnings to fatal errors.
        skip_checks: Bypass type-check, lint and all capability validators.
        bundle_size_warning_kb: Size above which output validation warns.
        runtime_path: Location of the runtime polyfill injected into the bundle.
        debounce_ms: Watch-mode trailing-edge debounce delay.
    """

    output_dir: str = "dist"
    minify: bool = True
    dev: bool = False
    watch: bool = False
    strict: bool = True
    skip_checks: bool = False
    bundle_size_warning_kb: int = 500
    runtime_path: str | None = None
    debounce_ms: int = 300

    @classmethod
    def from_config(cls, config: Config) -> BuildOptions:
        """Build options from the ``build.*`` section of a Config."""
        defaults = cls()
        return cls(
            output_dir=config.get("build.output_dir", defaults.output_dir),
            minify=config.get("build.minify", defaults.minify),
            dev=config.get("build.dev", defaults.dev),
            watch=config.get("build.watch", defaults.watch),
            strict=config.get("build.strict", defaults.strict),
            skip_checks=config.get("build.skip_checks", defaults.skip_checks),
            bundle_size_warning_kb=config.get("build.bundle_size_warning_kb", defaults.bundle_size_warning_kb),
            runtime_path=config.get("build.runtime_path"),
            debounce_ms=config.get("build.debounce_ms", defaults.debounce_ms),
        )

    @property
    def should_minify(self) -> bool:
        return self.minify and not self.dev

    def resolve_runtime_path(self) -> Path:
        """Explicit option wins, then the environment, then the fixed install location."""
        if self.runtime_path:
            return Path(self.runtime_path)
        return Path(os.environ.get(RUNTIME_PATH_ENV) or DEFAULT_RUNTIME_PATH)
