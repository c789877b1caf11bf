"""Bundle packaging: loader wrapping, checksums, manifest and output files."""

from modbuild.packaging.bundle import BundlePackager, PackagedBundle, compute_checksum
from modbuild.packaging.manifest import MANIFEST_FILENAME, REQUIRED_MANIFEST_FIELDS, BuildInfo, Manifest, build_manifest
from modbuild.packaging.template import render_loader
from modbuild.packaging.writer import SOURCE_MAP_FILENAME, OutputReport, OutputWriter

__all__ = [
    "BundlePackager",
    "PackagedBundle",
    "compute_checksum",
    "MANIFEST_FILENAME",
    "REQUIRED_MANIFEST_FIELDS",
    "BuildInfo",
    "Manifest",
    "build_manifest",
    "render_loader",
    "SOURCE_MAP_FILENAME",
    "OutputReport",
    "OutputWriter",
]
