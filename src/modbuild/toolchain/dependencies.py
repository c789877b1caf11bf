"""Dependency presence: install packages when node_modules is absent."""

from __future__ import annotations

import logging
from pathlib import Path

from modbuild.errors import ToolchainError
from modbuild.toolchain.runner import ProcessRunner, Runner

__all__ = ["ensure_dependencies"]

logger = logging.getLogger(__name__)


def ensure_dependencies(project_dir: Path, runner: Runner | None = None) -> bool:
    """Run ``npm install`` unless ``node_modules`` already exists.

    Returns True when an install was performed.

    Raises:
        ToolchainError: If the install fails.
    """
    if (project_dir / "node_modules").is_dir():
        return False
    runner = runner or ProcessRunner()
    logger.info("Installing dependencies...")
    result = runner.run(["npm", "install"], project_dir)
    if not result.ok:
        raise ToolchainError(tool="npm install", output=result.output, reason="failed to install dependencies")
    return True
