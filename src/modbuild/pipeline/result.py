"""Stage results and the policy that folds them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from modbuild.descriptor.types import ModuleDescriptor
from modbuild.errors import BuildError, CapabilityError
from modbuild.validation.types import ValidationReport

__all__ = ["StageStatus", "StageResult", "BuildPolicy", "BuildResult"]

logger = logging.getLogger(__name__)


class StageStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class StageResult:
    """Outcome of one pipeline stage: Ok, Warning(message) or Fatal(error)."""

    stage: str
    status: StageStatus = StageStatus.OK
    message: str | None = None
    error: BuildError | None = None

    @classmethod
    def ok(cls, stage: str) -> StageResult:
        return cls(stage)

    @classmethod
    def warning(cls, stage: str, message: str) -> StageResult:
        return cls(stage, StageStatus.WARNING, message=message)

    @classmethod
    def fatal(cls, stage: str, error: BuildError) -> StageResult:
        error.details["stage"] = stage
        return cls(stage, StageStatus.FATAL, message=error.message, error=error)

    @property
    def is_fatal(self) -> bool:
        return self.status is StageStatus.FATAL


@dataclass(frozen=True)
class BuildPolicy:
    """Strict/lenient/skip policy, passed explicitly to every fold.

    Attributes:
        strict: Promote warnings from the optional block and section validators to fatal.
        skip_checks: Bypass the optional block and all section validators.
    """

    strict: bool = True
    skip_checks: bool = False

    @property
    def run_checks(self) -> bool:
        return not self.skip_checks

    @property
    def validate_output(self) -> bool:
        return self.strict and not self.skip_checks

    def fold_report(self, stage: str, report: ValidationReport) -> StageResult:
        """Advisories are logged and never fail; errors and warnings are fatal only under strict."""
        for issue in report.advisories:
            logger.warning("[%s] %s", stage, issue.message)
        problems = report.errors + report.warnings
        if not problems:
            return StageResult.ok(stage)
        if self.strict:
            error = CapabilityError(report.check, [issue.to_dict() for issue in problems])
            return StageResult.fatal(stage, error)
        message = "; ".join(issue.message for issue in problems)
        logger.warning("[%s] %s", stage, message)
        return StageResult.warning(stage, message)

    def fold_failure(self, stage: str, error: BuildError, promotable: bool = True) -> StageResult:
        """A failure that is fatal only when promotable and strict; otherwise a warning."""
        if promotable and self.strict:
            return StageResult.fatal(stage, error)
        logger.warning("[%s] %s", stage, error.message)
        return StageResult.warning(stage, error.message)


@dataclass
class BuildResult:
    """Summary of a successful build."""

    descriptor: ModuleDescriptor
    manifest: dict[str, Any]
    bundle_path: Path
    manifest_path: Path
    bundle_size: int
    duration: float
    source_map_path: Path | None = None
    stages: list[StageResult] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [s.message for s in self.stages if s.status is StageStatus.WARNING and s.message]

    @property
    def bundle_size_kb(self) -> float:
        return self.bundle_size / 1024
