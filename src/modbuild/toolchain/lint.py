"""Linter invocation (``eslint``)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from modbuild.errors import ToolchainError
from modbuild.toolchain.runner import ProcessRunner, Runner

__all__ = ["ESLINT_CONFIG_FILENAME", "ESLINT_IGNORE_FILENAME", "DEFAULT_ESLINT_CONFIG", "Linter", "ensure_eslint_config"]

logger = logging.getLogger(__name__)

ESLINT_CONFIG_FILENAME = ".eslintrc.json"
ESLINT_IGNORE_FILENAME = ".eslintignore"

DEFAULT_ESLINT_CONFIG = {
    "parser": "@typescript-eslint/parser",
    "extends": [
        "eslint:recommended",
        "plugin:@typescript-eslint/recommended",
        "plugin:react/recommended",
        "plugin:react-hooks/recommended",
    ],
    "plugins": ["@typescript-eslint", "react", "react-hooks"],
    "parserOptions": {"ecmaVersion": 2020, "sourceType": "module", "ecmaFeatures": {"jsx": True}},
    "settings": {"react": {"version": "detect"}},
    "env": {"browser": True, "es2020": True, "node": True},
    "rules": {
        "react/react-in-jsx-scope": "off",
        "@typescript-eslint/no-explicit-any": "warn",
        "@typescript-eslint/explicit-module-boundary-types": "off",
        "no-console": ["warn", {"allow": ["warn", "error"]}],
        "react/prop-types": "off",
    },
    "ignorePatterns": ["dist/", "build/", "node_modules/", "*.js"],
}

DEFAULT_ESLINT_IGNORE = "dist/\nbuild/\nnode_modules/\n*.js\n"


def ensure_eslint_config(project_dir: Path) -> bool:
    """Write the default lint config and ignore file when absent. Returns True if the config was created."""
    config_path = project_dir / ESLINT_CONFIG_FILENAME
    if config_path.exists():
        return False
    config_path.write_text(json.dumps(DEFAULT_ESLINT_CONFIG, indent=2) + "\n", encoding="utf-8")
    ignore_path = project_dir / ESLINT_IGNORE_FILENAME
    if not ignore_path.exists():
        ignore_path.write_text(DEFAULT_ESLINT_IGNORE, encoding="utf-8")
    logger.info("Created lint configuration in %s", project_dir)
    return True


class Linter:
    def __init__(self, project_dir: Path, runner: Runner | None = None) -> None:
        self.project_dir = Path(project_dir)
        self.runner = runner or ProcessRunner()

    def lint(self) -> None:
        """Run the linter over the project's TypeScript sources.

        Raises:
            ToolchainError: If the linter reports problems.
        """
        ensure_eslint_config(self.project_dir)
        result = self.runner.run(["npx", "eslint", ".", "--ext", ".ts,.tsx"], self.project_dir)
        if result.ok:
            logger.info("Lint passed")
            return
        logger.error("Lint found issues:\n%s", result.output)
        raise ToolchainError(tool="eslint", output=result.output)
