"""Error hierarchy for the modbuild pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "BuildError",
    "ConfigNotFoundError",
    "ConfigError",
    "StructureError",
    "MetadataError",
    "ExtractionError",
    "CapabilityError",
    "ToolchainError",
    "ToolNotFoundError",
    "CompilationError",
    "OutputValidationError",
    "ErrorCodes",
]


class BuildError(Exception):
    """Base error for all modbuild errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def stage(self) -> str | None:
        """Pipeline stage that raised this error, once the orchestrator has recorded it."""
        return self.details.get("stage")


class ConfigNotFoundError(BuildError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(BuildError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class StructureError(BuildError):
    """Raised when a required project file is absent."""

    def __init__(self, file_name: str, **kwargs: Any) -> None:
        super().__init__(
            code="STRUCTURE_MISSING_FILE",
            message=f"{file_name} not found",
            details={"file_name": file_name},
            **kwargs,
        )

    @property
    def file_name(self) -> str:
        """The required file (or candidate list) that was not found."""
        return self.details["file_name"]


class MetadataError(BuildError):
    """Raised when a required identity field is missing or malformed."""

    def __init__(self, field: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="METADATA_INVALID",
            message=f"Invalid module metadata '{field}': {reason}",
            details={"field": field, "reason": reason},
            **kwargs,
        )

    @property
    def field(self) -> str:
        """The identity field that failed."""
        return self.details["field"]


class ExtractionError(BuildError):
    """Raised when an optional descriptor section cannot be read."""

    def __init__(self, section: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="EXTRACTION_FAILED",
            message=f"Failed to extract {section}: {reason}",
            details={"section": section, "reason": reason},
            **kwargs,
        )


class CapabilityError(BuildError):
    """Raised when a capability, webhook, permission or schema check fails under strict policy."""

    def __init__(self, check: str, issues: list[dict[str, Any]], **kwargs: Any) -> None:
        summary = "; ".join(issue["message"] for issue in issues) or "check failed"
        super().__init__(
            code="CAPABILITY_VIOLATION",
            message=f"{check} failed: {summary}",
            details={"check": check, "issues": issues},
            **kwargs,
        )

    @property
    def issues(self) -> list[dict[str, Any]]:
        """The individual issues that made the check fail."""
        return self.details["issues"]


class ToolchainError(BuildError):
    """Raised when an external tool exits with a nonzero status."""

    def __init__(self, tool: str, output: str = "", reason: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="TOOLCHAIN_FAILED",
            message=f"{tool} failed" + (f": {reason}" if reason else ""),
            details={"tool": tool, "output": output},
            **kwargs,
        )

    @property
    def tool(self) -> str:
        """Name of the external tool."""
        return self.details["tool"]

    @property
    def output(self) -> str:
        """Captured output of the failed tool run."""
        return self.details["output"]


class ToolNotFoundError(BuildError):
    """Raised when an external tool executable is not installed."""

    def __init__(self, executable: str, **kwargs: Any) -> None:
        super().__init__(
            code="TOOL_NOT_FOUND",
            message=f"Executable not found: {executable}",
            details={"executable": executable},
            **kwargs,
        )


class CompilationError(BuildError):
    """Raised when the compiler reports errors or emits no output."""

    def __init__(
        self,
        message: str = "Compilation failed",
        diagnostics: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            code="COMPILATION_FAILED",
            message=message,
            details={"diagnostics": diagnostics or []},
            **kwargs,
        )

    @property
    def diagnostics(self) -> list[dict[str, Any]]:
        """Compiler diagnostics as (message, file, line, column) dicts."""
        return self.details["diagnostics"]


class OutputValidationError(BuildError):
    """Raised when a packaged artifact is missing or incomplete."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="OUTPUT_INVALID", message=message, **kwargs)


class ErrorCodes:
    """Every ``BuildError.code`` value, for comparisons without string literals.

    Example:
        except BuildError as e:
            if e.code == ErrorCodes.METADATA_INVALID:
                print(e.details["field"])
    """

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    STRUCTURE_MISSING_FILE = "STRUCTURE_MISSING_FILE"
    METADATA_INVALID = "METADATA_INVALID"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    CAPABILITY_VIOLATION = "CAPABILITY_VIOLATION"
    TOOLCHAIN_FAILED = "TOOLCHAIN_FAILED"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    COMPILATION_FAILED = "COMPILATION_FAILED"
    OUTPUT_INVALID = "OUTPUT_INVALID"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
