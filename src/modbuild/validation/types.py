"""Validation issue types shared by every validator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = ["Severity", "ValidationIssue", "ValidationReport"]


class Severity(str, Enum):
    """How an issue is treated by the build policy.

    ERROR and WARNING are promoted to fatal under strict mode; ADVISORY is
    informational only.
    """

    ERROR = "error"
    WARNING = "warning"
    ADVISORY = "advisory"


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found by a validator.

    Attributes:
        severity: How the policy treats it.
        code: Stable machine-readable identifier (``missing_method``).
        message: Human-readable description.
        subject: What the issue is about (interface, event, field name).
    """

    severity: Severity
    code: str
    message: str
    subject: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.subject is not None:
            result["subject"] = self.subject
        return result


@dataclass
class ValidationReport:
    """Issues collected by one validation check."""

    check: str
    issues: list[ValidationIssue] = field(default_factory=list)

    def add(self, severity: Severity, code: str, message: str, subject: str | None = None) -> None:
        self.issues.append(ValidationIssue(severity, code, message, subject))

    def error(self, code: str, message: str, subject: str | None = None) -> None:
        self.add(Severity.ERROR, code, message, subject)

    def warning(self, code: str, message: str, subject: str | None = None) -> None:
        self.add(Severity.WARNING, code, message, subject)

    def advisory(self, code: str, message: str, subject: str | None = None) -> None:
        self.add(Severity.ADVISORY, code, message, subject)

    def extend(self, other: ValidationReport) -> None:
        self.issues.extend(other.issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def advisories(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ADVISORY]

    @property
    def ok(self) -> bool:
        """True when nothing but advisories was found."""
        return not self.errors and not self.warnings

    def subjects(self, code: str | None = None) -> list[str]:
        return [i.subject for i in self.issues if i.subject is not None and (code is None or i.code == code)]
