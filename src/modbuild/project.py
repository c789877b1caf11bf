"""Project layout discovery: which files in a module directory play which role."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from modbuild.errors import ConfigError, ExtractionError, StructureError

__all__ = [
    "MODULE_CANDIDATES",
    "COMPONENT_CANDIDATES",
    "HOOKS_CANDIDATES",
    "ENTRY_CANDIDATES",
    "PACKAGE_MANIFEST",
    "ProjectLayout",
    "find_first",
]

logger = logging.getLogger(__name__)

MODULE_CANDIDATES = ("Module.tsx", "Module.ts", "src/Module.tsx", "src/Module.ts")
COMPONENT_CANDIDATES = ("Component.tsx", "src/Component.tsx", "Component.ts", "src/Component.ts")
HOOKS_CANDIDATES = (
    "hooks/useModuleData.ts",
    "hooks/useData.ts",
    "src/hooks/useModuleData.ts",
    "src/hooks/useData.ts",
    "hooks/index.ts",
    "src/hooks/index.ts",
)
ENTRY_CANDIDATES = MODULE_CANDIDATES + ("index.tsx", "index.ts", "src/index.tsx", "src/index.ts")
PACKAGE_MANIFEST = "package.json"


def find_first(root: Path, candidates: tuple[str, ...]) -> Path | None:
    """First candidate (relative to ``root``) that exists as a file."""
    for candidate in candidates:
        path = root / candidate
        if path.is_file():
            return path
    return None


def _read(path: Path | None, section: str) -> str | None:
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ExtractionError(section, f"cannot read {path}: {e}", cause=e) from e


@dataclass(frozen=True)
class ProjectLayout:
    """Resolved role files of a module project.

    Attributes:
        root: Project directory.
        module_file: Module declaration source.
        package_manifest: The package descriptor (package.json).
        component_file: UI component source, if present.
        hooks_file: Data hooks source, if present.
        entry_point: Compiler entry point.
    """

    root: Path
    module_file: Path
    package_manifest: Path
    component_file: Path | None = None
    hooks_file: Path | None = None
    entry_point: Path | None = None

    @classmethod
    def discover(cls, root: str | Path) -> ProjectLayout:
        """Locate the role files under ``root``.

        Raises:
            StructureError: If the module file or package descriptor is absent.
        """
        root = Path(root).resolve()
        module_file = find_first(root, MODULE_CANDIDATES)
        if module_file is None:
            raise StructureError(file_name=" or ".join(MODULE_CANDIDATES[:2]))

        component_file = find_first(root, COMPONENT_CANDIDATES)
        if component_file is None:
            logger.warning("Component.tsx not found - module may not have a UI component")

        package_manifest = root / PACKAGE_MANIFEST
        if not package_manifest.is_file():
            raise StructureError(file_name=PACKAGE_MANIFEST)

        return cls(
            root=root,
            module_file=module_file,
            package_manifest=package_manifest,
            component_file=component_file,
            hooks_file=find_first(root, HOOKS_CANDIDATES),
            entry_point=find_first(root, ENTRY_CANDIDATES),
        )

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def read_module(self) -> str:
        return _read(self.module_file, "module") or ""

    def read_component(self) -> str | None:
        return _read(self.component_file, "component")

    def read_hooks(self) -> str | None:
        return _read(self.hooks_file, "hooks")

    def load_package_manifest(self) -> dict[str, Any]:
        """Parse package.json.

        Raises:
            ConfigError: If the file is not a JSON object.
        """
        try:
            data = json.loads(self.package_manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(message=f"Invalid package descriptor: {self.package_manifest}", cause=e) from e
        if not isinstance(data, dict):
            raise ConfigError(message=f"Package descriptor must be a JSON object: {self.package_manifest}")
        return data
