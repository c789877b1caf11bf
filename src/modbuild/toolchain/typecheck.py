"""Type-checker invocation (``tsc --noEmit``)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from modbuild.errors import ToolchainError
from modbuild.toolchain.runner import ProcessRunner, Runner
from modbuild.validation.types import ValidationReport

__all__ = ["TSCONFIG_FILENAME", "DEFAULT_TSCONFIG", "TypeChecker", "ensure_tsconfig", "parse_type_errors"]

logger = logging.getLogger(__name__)

TSCONFIG_FILENAME = "tsconfig.json"

DEFAULT_TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "module": "ESNext",
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "jsx": "react",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "forceConsistentCasingInFileNames": True,
        "moduleResolution": "node",
        "resolveJsonModule": True,
        "noEmit": True,
        "types": ["react", "react-dom", "node"],
    },
    "include": ["**/*.ts", "**/*.tsx"],
    "exclude": ["node_modules", "dist", "build"],
}

_UNUSED_MARKER = "is declared but"


def ensure_tsconfig(project_dir: Path) -> bool:
    """Write the default tsconfig when the project has none. Returns True if one was created."""
    path = project_dir / TSCONFIG_FILENAME
    if path.exists():
        return False
    path.write_text(json.dumps(DEFAULT_TSCONFIG, indent=2) + "\n", encoding="utf-8")
    logger.info("Created %s", path)
    return True


def parse_type_errors(output: str) -> list[str]:
    """Collect ``error TS`` lines, prefixing bare file references onto the previous error."""
    errors: list[str] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        if "error TS" in line:
            errors.append(line)
        elif (line.startswith("src/") or line.startswith("./")) and errors and line not in errors[-1]:
            errors[-1] = f"{line} - {errors[-1]}"
    return errors


class TypeChecker:
    def __init__(self, project_dir: Path, runner: Runner | None = None) -> None:
        self.project_dir = Path(project_dir)
        self.runner = runner or ProcessRunner()

    def check(self) -> None:
        """Run the type-checker.

        Raises:
            ToolchainError: If any type error is reported.
        """
        ensure_tsconfig(self.project_dir)
        result = self.runner.run(["npx", "tsc", "--noEmit", "--skipLibCheck"], self.project_dir)
        if result.ok:
            logger.info("Type checking passed")
            return
        errors = parse_type_errors(result.output)
        for error in errors:
            logger.error("%s", error)
        reason = f"found {len(errors)} type errors" if errors else None
        raise ToolchainError(tool="tsc", output=result.output, reason=reason)

    def check_unused(self) -> ValidationReport:
        """Unused locals and parameters, reported as advisories."""
        report = ValidationReport("unused_code")
        result = self.runner.run(
            ["npx", "tsc", "--noEmit", "--noUnusedLocals", "--noUnusedParameters"],
            self.project_dir,
        )
        if result.ok:
            return report
        for line in result.output.splitlines():
            if _UNUSED_MARKER in line:
                report.advisory("unused_code", line.strip())
        return report
