"""External tools the pipeline delegates to."""

from modbuild.toolchain.compiler import CompileRequest, CompileResult, EsbuildCompiler, parse_diagnostics
from modbuild.toolchain.dependencies import ensure_dependencies
from modbuild.toolchain.lint import Linter, ensure_eslint_config
from modbuild.toolchain.runner import ProcessRunner, ToolResult
from modbuild.toolchain.typecheck import TypeChecker, ensure_tsconfig, parse_type_errors

__all__ = [
    "CompileRequest",
    "CompileResult",
    "EsbuildCompiler",
    "parse_diagnostics",
    "ensure_dependencies",
    "Linter",
    "ensure_eslint_config",
    "ProcessRunner",
    "ToolResult",
    "TypeChecker",
    "ensure_tsconfig",
    "parse_type_errors",
]
