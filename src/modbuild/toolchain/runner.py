"""Blocking invocation of external tools."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from modbuild.errors import ToolNotFoundError

__all__ = ["ToolResult", "Runner", "ProcessRunner"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Exit status and captured output of one tool run."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, as a terminal would show them."""
        if self.stdout and self.stderr:
            return f"{self.stdout.rstrip()}\n{self.stderr}"
        return self.stdout or self.stderr


class Runner(Protocol):
    """Anything that can run a command in a directory and report how it went."""

    def run(self, args: Sequence[str], cwd: Path) -> ToolResult: ...


class ProcessRunner:
    """Runs commands with ``subprocess.run`` and captures their text output."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: Path) -> ToolResult:
        """Run ``args`` in ``cwd``.

        Raises:
            ToolNotFoundError: If the executable is not installed.
        """
        logger.debug("Running %s in %s", " ".join(args), cwd)
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(executable=args[0], cause=e) from e
        return ToolResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
