"""Project hygiene checks run in the optional validation block."""

from __future__ import annotations

import re
from typing import Any, Mapping

from modbuild.validation.types import ValidationReport

__all__ = [
    "RUNTIME_LIBRARY",
    "check_runtime_compatibility",
    "check_package_manifest",
    "check_common_issues",
    "check_satisfies_usage",
]

RUNTIME_LIBRARY = "dashspace-lib"
REACT_TYPE_PACKAGES = ("@types/react", "@types/react-dom")
DEV_TOOLS = ("eslint", "typescript", "@types/react", "@types/react-dom", "prettier")
RUNTIME_PACKAGES = ("react", "react-dom")

_INTERFACE_KEY = re.compile(r"\b(I[A-Z]\w*)\s*:\s*\{")


def _section(package: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = package.get(key)
    return value if isinstance(value, dict) else {}


def check_runtime_compatibility(package: Mapping[str, Any]) -> ValidationReport:
    """The runtime library must be a declared dependency; React typings are recommended."""
    report = ValidationReport("runtime_compatibility")
    deps = _section(package, "dependencies")
    dev_deps = _section(package, "devDependencies")

    if RUNTIME_LIBRARY not in deps and RUNTIME_LIBRARY not in dev_deps:
        report.warning(
            "runtime_missing",
            f"{RUNTIME_LIBRARY} is not installed. Run: npm install {RUNTIME_LIBRARY}",
            subject=RUNTIME_LIBRARY,
        )
    missing_types = [name for name in REACT_TYPE_PACKAGES if name not in dev_deps]
    if missing_types:
        report.advisory(
            "react_types_missing",
            f"Missing React type definitions: {', '.join(missing_types)}",
        )
    return report


def check_package_manifest(package: Mapping[str, Any]) -> ValidationReport:
    report = ValidationReport("package_manifest")

    for key in ("name", "version"):
        if key not in package:
            report.warning("field_missing", f"Missing '{key}' field", subject=key)

    scripts = _section(package, "scripts")
    if not scripts:
        report.warning("scripts_missing", "No scripts defined")
    else:
        if "build" not in scripts:
            report.warning("build_script_missing", "Missing 'build' script", subject="build")
        if "test" not in scripts:
            report.advisory("test_script_missing", "No 'test' script defined", subject="test")

    deps = _section(package, "dependencies")
    for tool in DEV_TOOLS:
        if tool in deps:
            report.warning(
                "misplaced_dev_tool",
                f"'{tool}' should be in devDependencies, not dependencies",
                subject=tool,
            )
    dev_deps = _section(package, "devDependencies")
    for dep in RUNTIME_PACKAGES:
        if dep in dev_deps:
            report.warning(
                "misplaced_runtime_dependency",
                f"'{dep}' should be in dependencies or peerDependencies, not devDependencies",
                subject=dep,
            )
    return report


def check_common_issues(module_source: str, component_source: str | None = None) -> ValidationReport:
    report = ValidationReport("common_issues")

    if "console.log" in module_source:
        report.advisory("console_log", "console.log found in the module - consider removing it for production")
    if "localhost" in module_source or "http://127.0.0.1" in module_source:
        report.advisory("hardcoded_url", "Hardcoded localhost URL found - should be configurable")
    if "TODO" in module_source or "FIXME" in module_source:
        report.advisory("todo_comment", "TODO/FIXME comments found - resolve before publishing")

    if component_source is not None:
        any_count = component_source.count(": any")
        if any_count:
            report.advisory("any_type", f"Found {any_count} uses of 'any' type - consider using proper types")
        if "error" not in component_source:
            report.advisory("no_error_state", "No error handling found in the component - consider adding error states")
        if "loading" not in component_source:
            report.advisory("no_loading_state", "No loading state found in the component - consider adding loading indicators")
    return report


def check_satisfies_usage(component_source: str | None) -> ValidationReport:
    """Recommend ``satisfies`` annotations on interface handler blocks."""
    report = ValidationReport("type_safety")
    if component_source is None:
        return report

    for name in dict.fromkeys(_INTERFACE_KEY.findall(component_source)):
        if f"satisfies {name}" not in component_source:
            report.advisory(
                "satisfies_missing",
                f"Consider using 'satisfies {name}' for better type safety",
                subject=name,
            )
    if "InterfaceHandlers" in component_source and "satisfies InterfaceHandlers" not in component_source:
        report.advisory(
            "satisfies_missing",
            "Consider using 'satisfies InterfaceHandlers' for better type safety",
            subject="InterfaceHandlers",
        )
    return report
