"""BundlePackager: wraps compiled code in the loader and checksums it."""

from __future__ import annotations

import dataclasses
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from modbuild.descriptor.types import ModuleDescriptor
from modbuild.packaging.template import render_loader

__all__ = ["PackagedBundle", "BundlePackager", "compute_checksum"]

logger = logging.getLogger(__name__)


def compute_checksum(text: str) -> str:
    """Hex sha256 of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PackagedBundle:
    """Wrapped bundle text plus the descriptor stamped with checksum and timestamp."""

    text: str
    checksum: str
    timestamp: str
    descriptor: ModuleDescriptor

    @property
    def size(self) -> int:
        return len(self.text.encode("utf-8"))


class BundlePackager:
    """Produces the final bundle for a compiled module.

    Args:
        runtime_path: Location of the optional runtime polyfill.
        clock: Returns the build time; injectable for reproducible output.
    """

    def __init__(self, runtime_path: Path | None = None, clock: Callable[[], datetime] | None = None) -> None:
        self.runtime_path = runtime_path
        self.clock = clock or _utc_now

    def load_polyfill(self) -> str:
        """Runtime polyfill text, or empty text (with a warning) when it is unavailable."""
        if self.runtime_path is None:
            return ""
        try:
            text = self.runtime_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Runtime polyfill not found at %s; bundling without it", self.runtime_path)
            return ""
        except OSError as e:
            logger.warning("Failed to read runtime polyfill %s: %s", self.runtime_path, e)
            return ""
        logger.info("Using runtime polyfill: %s", self.runtime_path)
        return text

    def wrap(self, code: str, module_id: int, polyfill: str | None = None) -> str:
        return render_loader(module_id, self.load_polyfill() if polyfill is None else polyfill, code)

    def package(self, code: str, descriptor: ModuleDescriptor) -> PackagedBundle:
        text = self.wrap(code, descriptor.id)
        checksum = compute_checksum(text)
        timestamp = self.clock().isoformat()
        stamped = dataclasses.replace(descriptor, checksum=checksum, timestamp=timestamp)
        logger.debug("Packaged module %d: sha256=%s", descriptor.id, checksum)
        return PackagedBundle(text=text, checksum=checksum, timestamp=timestamp, descriptor=stamped)
