"""modbuild - descriptor extraction and packaging pipeline for dashboard modules."""

from __future__ import annotations

# Pipeline
from modbuild.pipeline import BuildPipeline, BuildPolicy, BuildResult, BuildWatcher, StageResult, StageStatus
from modbuild.project import ProjectLayout

# Descriptor
from modbuild.descriptor import DescriptorExtractor, ModuleDescriptor, sanitize_slug
from modbuild.scanning import Block, extract_block, find_matching

# Validation
from modbuild.validation import (
    CapabilityValidator,
    Severity,
    ValidationIssue,
    ValidationReport,
    WebhookValidator,
)

# Packaging
from modbuild.packaging import BundlePackager, Manifest, OutputWriter, build_manifest, compute_checksum

# Config
from modbuild.config import BuildOptions, Config

# Errors
from modbuild.errors import (
    BuildError,
    CapabilityError,
    CompilationError,
    ConfigError,
    ConfigNotFoundError,
    ErrorCodes,
    ExtractionError,
    MetadataError,
    OutputValidationError,
    StructureError,
    ToolchainError,
    ToolNotFoundError,
)

from modbuild.version import __version__

__all__ = [
    # Pipeline
    "BuildPipeline",
    "BuildPolicy",
    "BuildResult",
    "BuildWatcher",
    "StageResult",
    "StageStatus",
    "ProjectLayout",
    # Descriptor
    "DescriptorExtractor",
    "ModuleDescriptor",
    "sanitize_slug",
    "Block",
    "extract_block",
    "find_matching",
    # Validation
    "CapabilityValidator",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "WebhookValidator",
    # Packaging
    "BundlePackager",
    "Manifest",
    "OutputWriter",
    "build_manifest",
    "compute_checksum",
    # Config
    "BuildOptions",
    "Config",
    # Errors
    "BuildError",
    "CapabilityError",
    "CompilationError",
    "ConfigError",
    "ConfigNotFoundError",
    "ErrorCodes",
    "ExtractionError",
    "MetadataError",
    "OutputValidationError",
    "StructureError",
    "ToolchainError",
    "ToolNotFoundError",
    # Version
    "__version__",
]
