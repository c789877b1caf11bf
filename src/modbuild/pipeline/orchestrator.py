"""BuildPipeline: runs every build stage in order under a BuildPolicy."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, NoReturn

from modbuild.config import BuildOptions
from modbuild.descriptor.extractor import DescriptorExtractor
from modbuild.errors import BuildError, ExtractionError, MetadataError, OutputValidationError, StructureError
from modbuild.packaging.bundle import BundlePackager
from modbuild.packaging.manifest import build_manifest
from modbuild.packaging.writer import OutputWriter
from modbuild.pipeline.result import BuildPolicy, BuildResult, StageResult
from modbuild.project import ProjectLayout
from modbuild.toolchain.compiler import CompileRequest, Compiler, EsbuildCompiler
from modbuild.toolchain.dependencies import ensure_dependencies
from modbuild.toolchain.lint import Linter
from modbuild.toolchain.runner import ProcessRunner, Runner
from modbuild.toolchain.typecheck import TypeChecker
from modbuild.validation.advisory import (
    check_common_issues,
    check_package_manifest,
    check_runtime_compatibility,
    check_satisfies_usage,
)
from modbuild.validation.capabilities import CapabilityValidator
from modbuild.validation.metadata import validate_data_schema, validate_metadata, validate_permissions
from modbuild.validation.types import ValidationReport
from modbuild.validation.webhooks import WebhookValidator
from modbuild.version import __version__

__all__ = ["BuildPipeline", "STAGES"]

logger = logging.getLogger(__name__)

STAGES = (
    "structure",
    "dependencies",
    "typecheck",
    "runtime_compatibility",
    "capabilities",
    "unused_code",
    "type_safety",
    "lint",
    "package_manifest",
    "common_issues",
    "metadata",
    "configuration_steps",
    "providers",
    "interfaces",
    "webhooks",
    "permissions",
    "data_schema",
    "compile",
    "bundle",
    "write",
    "output",
)


class BuildPipeline:
    """Builds one module project into a bundle and manifest.

    Each stage yields a StageResult; the first Fatal one ends the run and its
    error is raised with ``details["stage"]`` set. Collaborators that reach
    outside the process (tool runner, compiler, packager clock) are
    injectable.

    Args:
        project_dir: Root of the module project.
        options: Build options; defaults to ``BuildOptions()``.
        runner: Runs the type-checker, linter and package installer.
        compiler: Turns the entry point into compiled code.
        packager: Wraps compiled code into the final bundle.
        capability_validator: Checks declared interfaces against the component.
        webhook_validator: Checks the webhook binding against the sources.
        clock: Build time source, used when ``packager`` is not given.
    """

    def __init__(
        self,
        project_dir: str | Path,
        options: BuildOptions | None = None,
        runner: Runner | None = None,
        compiler: Compiler | None = None,
        packager: BundlePackager | None = None,
        capability_validator: CapabilityValidator | None = None,
        webhook_validator: WebhookValidator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.project_dir = Path(project_dir).resolve()
        self.options = options or BuildOptions()
        self.policy = BuildPolicy(strict=self.options.strict, skip_checks=self.options.skip_checks)
        self.runner = runner or ProcessRunner()
        self.compiler = compiler or EsbuildCompiler(self.runner)
        self.packager = packager or BundlePackager(self.options.resolve_runtime_path(), clock=clock)
        self.capability_validator = capability_validator or CapabilityValidator()
        self.webhook_validator = webhook_validator or WebhookValidator()
        self._stages: list[StageResult] = []

    @property
    def output_dir(self) -> Path:
        output = Path(self.options.output_dir)
        return output if output.is_absolute() else self.project_dir / output

    def _record(self, result: StageResult) -> None:
        """Append ``result``; a Fatal result (the only kind carrying an error) ends the run."""
        if result.error is not None:
            self._fail(result.stage, result.error)
        self._stages.append(result)

    def _fail(self, stage: str, error: BuildError) -> NoReturn:
        self._stages.append(StageResult.fatal(stage, error))
        logger.error("Build failed at stage '%s': %s", stage, error.message)
        raise error

    def _fold(self, stage: str, report: ValidationReport) -> None:
        self._record(self.policy.fold_report(stage, report))

    def run(self) -> BuildResult:
        """Run the full pipeline once.

        Raises:
            BuildError: The error of the first fatal stage.
        """
        self._stages = []
        started = time.monotonic()
        logger.info("Building module in %s", self.project_dir)

        # Step 1 -- Structure
        try:
            layout = ProjectLayout.discover(self.project_dir)
            module_source = layout.read_module()
        except BuildError as e:
            self._fail("structure", e)
        self._record(StageResult.ok("structure"))
        component_source = self._read_optional("component", layout.read_component)
        hooks_source = self._read_optional("hooks", layout.read_hooks)
        extractor = DescriptorExtractor(module_source, component_source, hooks_source)

        # Step 2 -- Dependencies
        try:
            ensure_dependencies(layout.root, self.runner)
        except BuildError as e:
            self._fail("dependencies", e)
        self._record(StageResult.ok("dependencies"))

        # Step 3 -- Optional checks
        if self.policy.run_checks:
            self._run_checks(layout, extractor, module_source, component_source)
        else:
            logger.info("Skipping validation checks")

        # Step 4 -- Metadata
        try:
            descriptor = extractor.extract_identity()
        except (MetadataError, ExtractionError) as e:
            self._fail("metadata", e)
        if self.policy.run_checks:
            self._fold("metadata", validate_metadata(descriptor))
        else:
            self._record(StageResult.ok("metadata"))
        logger.info("Module: %s v%s (id %d)", descriptor.name, descriptor.version, descriptor.id)

        # Step 5 -- Section extraction
        steps = self._extract("configuration_steps", extractor.extract_configuration_steps, ())
        providers = self._extract("providers", extractor.extract_providers, ())
        interfaces = self._extract("interfaces", extractor.extract_interfaces, ())
        webhooks = self._extract("webhooks", extractor.extract_webhooks, None)
        if webhooks is not None and self.policy.run_checks:
            self._fold("webhooks", self.webhook_validator.validate(webhooks, module_source, component_source))
        permissions = self._extract("permissions", extractor.extract_permissions, ())
        if self.policy.run_checks:
            self._fold("permissions", validate_permissions(permissions))
        data_schema = self._extract("data_schema", extractor.extract_data_schema, None)
        if self.policy.run_checks:
            self._fold("data_schema", validate_data_schema(data_schema))
        for message in extractor.diagnostics:
            logger.debug("Extraction: %s", message)

        descriptor = replace(
            descriptor,
            configuration_steps=steps,
            providers=providers,
            interfaces=interfaces,
            webhooks=webhooks,
            permissions=permissions,
            data_schema=data_schema,
        )

        # Step 6 -- Compile
        if layout.entry_point is None:
            self._fail("compile", StructureError(file_name="entry point"))
        request = CompileRequest.from_options(layout.relative(layout.entry_point), layout.root, self.options)
        try:
            compiled = self.compiler.compile(request)
        except BuildError as e:
            self._fail("compile", e)
        for warning in compiled.warnings:
            logger.warning("Compiler: %s", warning)
        self._record(StageResult.ok("compile"))

        # Step 7 -- Bundle
        packaged = self.packager.package(compiled.code, descriptor)
        self._record(StageResult.ok("bundle"))

        # Step 8 -- Write
        writer = OutputWriter(self.output_dir)
        manifest = build_manifest(packaged.descriptor, __version__, validated=self.policy.run_checks)
        try:
            bundle_path = writer.write_bundle(packaged.text)
            source_map_path = writer.write_source_map(compiled.source_map if self.options.dev else None)
            manifest_path = writer.write_manifest(manifest)
        except OSError as e:
            self._fail("write", OutputValidationError(f"Failed to write output to {self.output_dir}: {e}", cause=e))
        self._record(StageResult.ok("write"))

        # Step 9 -- Output validation
        bundle_size = packaged.size
        if self.policy.validate_output:
            try:
                report = writer.validate(self.options.bundle_size_warning_kb)
            except OutputValidationError as e:
                self._fail("output", e)
            bundle_size = report.bundle_size
            if report.warnings:
                self._record(StageResult.warning("output", "; ".join(report.warnings)))
            else:
                self._record(StageResult.ok("output"))

        duration = time.monotonic() - started
        logger.info("Build completed in %.2fs: %s (%.2f KB)", duration, bundle_path, bundle_size / 1024)
        return BuildResult(
            descriptor=packaged.descriptor,
            manifest=manifest.to_dict(),
            bundle_path=bundle_path,
            manifest_path=manifest_path,
            source_map_path=source_map_path,
            bundle_size=bundle_size,
            duration=duration,
            stages=list(self._stages),
            diagnostics=list(extractor.diagnostics),
        )

    def _read_optional(self, section: str, read: Callable[[], str | None]) -> str | None:
        try:
            return read()
        except ExtractionError as e:
            self._record(self.policy.fold_failure(section, e, promotable=False))
            return None

    def _extract(self, section: str, extract: Callable[[], Any], default: Any) -> Any:
        try:
            value = extract()
        except ExtractionError as e:
            self._record(self.policy.fold_failure(section, e, promotable=False))
            return default
        self._record(StageResult.ok(section))
        return value

    def _run_checks(
        self,
        layout: ProjectLayout,
        extractor: DescriptorExtractor,
        module_source: str,
        component_source: str | None,
    ) -> None:
        try:
            TypeChecker(layout.root, self.runner).check()
        except BuildError as e:
            self._fail("typecheck", e)
        self._record(StageResult.ok("typecheck"))

        try:
            package = layout.load_package_manifest()
        except BuildError as e:
            self._fail("runtime_compatibility", e)
        self._fold("runtime_compatibility", check_runtime_compatibility(package))

        declared = extractor.extract_interfaces()
        self._fold("capabilities", self.capability_validator.check(declared, component_source))

        try:
            unused = TypeChecker(layout.root, self.runner).check_unused()
        except BuildError as e:
            self._record(self.policy.fold_failure("unused_code", e, promotable=False))
        else:
            self._fold("unused_code", unused)

        self._fold("type_safety", check_satisfies_usage(component_source))

        try:
            Linter(layout.root, self.runner).lint()
        except BuildError as e:
            self._record(self.policy.fold_failure("lint", e))
        else:
            self._record(StageResult.ok("lint"))

        self._fold("package_manifest", check_package_manifest(package))
        self._fold("common_issues", check_common_issues(module_source, component_source))
