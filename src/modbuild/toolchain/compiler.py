"""Compiler collaborator: turns the entry point into a single IIFE bundle."""

from __future__ import annotations

import json
import logging
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from modbuild.config import BuildOptions
from modbuild.errors import CompilationError
from modbuild.toolchain.runner import ProcessRunner, Runner

__all__ = [
    "DEFAULT_EXTERNALS",
    "CompileRequest",
    "CompileResult",
    "Compiler",
    "EsbuildCompiler",
    "parse_diagnostics",
]

logger = logging.getLogger(__name__)

DEFAULT_EXTERNALS = ("react", "react-dom", "dashspace-lib")

_ERROR_HEADER = re.compile(r"\[ERROR\]\s*(.+)$")
_LOCATION = re.compile(r"^\s*([^\s:]+):(\d+):(\d+):?\s*$")
_INLINE_ERROR = re.compile(r"^\s*([^\s:]+):(\d+):(\d+):\s*error:\s*(.+)$")


@dataclass(frozen=True)
class CompileRequest:
    """What the pipeline asks of the compiler.

    Attributes:
        entry_point: Entry file, relative to ``project_dir``.
        project_dir: Directory the compiler runs in.
        minify: Minify whitespace, identifiers and syntax.
        dev: Development build; also emits a source map.
        externals: Modules left as runtime imports instead of being bundled.
    """

    entry_point: str
    project_dir: Path
    minify: bool = True
    dev: bool = False
    target: str = "es2020"
    format: str = "iife"
    platform: str = "browser"
    externals: tuple[str, ...] = DEFAULT_EXTERNALS

    @classmethod
    def from_options(cls, entry_point: str, project_dir: Path, options: BuildOptions) -> CompileRequest:
        return cls(
            entry_point=entry_point,
            project_dir=Path(project_dir),
            minify=options.should_minify,
            dev=options.dev,
        )

    @property
    def node_env(self) -> str:
        return "development" if self.dev else "production"

    @property
    def source_map(self) -> bool:
        return self.dev


@dataclass(frozen=True)
class CompileResult:
    code: str
    source_map: str | None = None
    warnings: tuple[str, ...] = field(default=())


class Compiler(Protocol):
    def compile(self, request: CompileRequest) -> CompileResult: ...


def parse_diagnostics(output: str) -> list[dict[str, Any]]:
    """Extract ``(message, file, line, column)`` diagnostics from compiler output."""
    diagnostics: list[dict[str, Any]] = []
    pending: dict[str, Any] | None = None
    for line in output.splitlines():
        inline = _INLINE_ERROR.match(line)
        if inline is not None:
            diagnostics.append(
                {
                    "message": inline.group(4).strip(),
                    "file": inline.group(1),
                    "line": int(inline.group(2)),
                    "column": int(inline.group(3)),
                }
            )
            pending = None
            continue

        header = _ERROR_HEADER.search(line)
        if header is not None:
            pending = {"message": header.group(1).strip(), "file": None, "line": None, "column": None}
            diagnostics.append(pending)
            continue

        if pending is not None and pending["file"] is None:
            location = _LOCATION.match(line)
            if location is not None:
                pending["file"] = location.group(1)
                pending["line"] = int(location.group(2))
                pending["column"] = int(location.group(3))
                pending = None
    return diagnostics


class EsbuildCompiler:
    """Drives ``esbuild`` through ``npx`` and reads back the emitted files."""

    BUNDLE_NAME = "bundle.js"

    def __init__(self, runner: Runner | None = None) -> None:
        self.runner = runner or ProcessRunner()

    def command(self, request: CompileRequest, outfile: Path) -> list[str]:
        args = [
            "npx",
            "esbuild",
            request.entry_point,
            "--bundle",
            f"--format={request.format}",
            f"--platform={request.platform}",
            f"--target={request.target}",
            f"--define:process.env.NODE_ENV={json.dumps(request.node_env)}",
            "--loader:.json=json",
            "--loader:.css=css",
            f"--outfile={outfile}",
        ]
        args.extend(f"--external:{name}" for name in request.externals)
        if request.minify:
            args.append("--minify")
        if request.source_map:
            args.append("--sourcemap=external")
        return args

    def compile(self, request: CompileRequest) -> CompileResult:
        """Compile ``request.entry_point``.

        Raises:
            CompilationError: On compiler errors or empty output.
        """
        with tempfile.TemporaryDirectory(prefix="modbuild-") as tmp:
            outfile = Path(tmp) / self.BUNDLE_NAME
            result = self.runner.run(self.command(request, outfile), request.project_dir)
            if not result.ok:
                diagnostics = parse_diagnostics(result.output)
                for d in diagnostics:
                    logger.error("Build error: %s (%s:%s:%s)", d["message"], d["file"], d["line"], d["column"])
                raise CompilationError(
                    message=f"Compilation failed with {len(diagnostics) or 1} errors",
                    diagnostics=diagnostics or [{"message": result.output.strip(), "file": None, "line": None, "column": None}],
                )

            code = outfile.read_text(encoding="utf-8") if outfile.exists() else ""
            if not code.strip():
                raise CompilationError(message="Compiler produced no output")

            map_path = outfile.with_name(self.BUNDLE_NAME + ".map")
            source_map = map_path.read_text(encoding="utf-8") if map_path.exists() else None

        return CompileResult(code=code, source_map=source_map)
