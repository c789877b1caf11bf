"""OutputWriter: persists the bundle, manifest and source map, and validates them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from modbuild.descriptor.types import BUNDLE_FILENAME
from modbuild.errors import OutputValidationError
from modbuild.packaging.manifest import MANIFEST_FILENAME, REQUIRED_MANIFEST_FIELDS, Manifest

__all__ = ["SOURCE_MAP_FILENAME", "OutputReport", "OutputWriter"]

logger = logging.getLogger(__name__)

SOURCE_MAP_FILENAME = BUNDLE_FILENAME + ".map"


@dataclass
class OutputReport:
    bundle_size: int
    warnings: list[str] = field(default_factory=list)


class OutputWriter:
    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    @property
    def bundle_path(self) -> Path:
        return self.output_dir / BUNDLE_FILENAME

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_FILENAME

    @property
    def source_map_path(self) -> Path:
        return self.output_dir / SOURCE_MAP_FILENAME

    def prepare(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_bundle(self, text: str) -> Path:
        self.prepare()
        self.bundle_path.write_text(text, encoding="utf-8")
        return self.bundle_path

    def write_manifest(self, manifest: Manifest) -> Path:
        self.prepare()
        self.manifest_path.write_text(manifest.to_json() + "\n", encoding="utf-8")
        return self.manifest_path

    def write_source_map(self, source_map: str | None) -> Path | None:
        """Write the source map; a stale one is removed when there is none."""
        if not source_map:
            if self.source_map_path.exists():
                self.source_map_path.unlink()
            return None
        self.prepare()
        self.source_map_path.write_text(source_map, encoding="utf-8")
        return self.source_map_path

    def validate(self, size_warning_kb: int = 500) -> OutputReport:
        """Check the written artifacts.

        Raises:
            OutputValidationError: If the bundle or manifest is missing or incomplete.
        """
        if not self.bundle_path.is_file():
            raise OutputValidationError(f"{BUNDLE_FILENAME} not found in {self.output_dir}")
        report = OutputReport(bundle_size=self.bundle_path.stat().st_size)
        size_kb = report.bundle_size / 1024
        if size_kb > size_warning_kb:
            message = f"Bundle size is {size_kb:.2f} KB - consider optimizing"
            logger.warning(message)
            report.warnings.append(message)

        if not self.manifest_path.is_file():
            raise OutputValidationError(f"{MANIFEST_FILENAME} not found in {self.output_dir}")
        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise OutputValidationError(f"Invalid {MANIFEST_FILENAME}: {e}", cause=e) from e
        if not isinstance(data, dict):
            raise OutputValidationError(f"Invalid {MANIFEST_FILENAME}: not a JSON object")

        for key in REQUIRED_MANIFEST_FIELDS:
            if key not in data:
                raise OutputValidationError(f"{MANIFEST_FILENAME} missing required field: {key}")
        try:
            Manifest.model_validate(data)
        except ValidationError as e:
            raise OutputValidationError(f"Invalid {MANIFEST_FILENAME}: {e}", cause=e) from e

        logger.info("Output validation passed")
        return report
