"""Manifest document model and assembly."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from modbuild.descriptor.types import BUNDLE_FILENAME, ModuleDescriptor

__all__ = ["MANIFEST_FILENAME", "REQUIRED_MANIFEST_FIELDS", "BuildInfo", "Manifest", "build_manifest"]

MANIFEST_FILENAME = "manifest.json"
REQUIRED_MANIFEST_FIELDS = ("id", "name", "version", "checksum", "timestamp")


class BuildInfo(BaseModel):
    cli_version: str
    build_date: str
    validated: bool


class Manifest(BaseModel):
    """The machine-readable document written next to the bundle.

    Optional sections are None when empty and omitted on serialization.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    slug: str
    name: str
    version: str
    description: str = ""
    author: str = ""
    entry: str = BUNDLE_FILENAME
    checksum: str
    timestamp: str
    requires_setup: bool = False
    build_info: BuildInfo | None = None
    icon: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    configuration_steps: list[dict[str, Any]] | None = None
    providers: list[dict[str, Any]] | None = None
    interfaces: list[str] | None = None
    permissions: list[str] | None = None
    webhooks: dict[str, Any] | None = None
    data_schema: dict[str, Any] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True, indent=2)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _or_none(values: list[Any]) -> list[Any] | None:
    return values or None


def build_manifest(descriptor: ModuleDescriptor, cli_version: str, validated: bool = True) -> Manifest:
    """Assemble the manifest for a packaged descriptor.

    ``descriptor`` must already carry its checksum and timestamp.
    """
    if descriptor.checksum is None or descriptor.timestamp is None:
        raise ValueError("descriptor has not been packaged: checksum and timestamp are required")

    webhooks = descriptor.webhooks.to_dict() if descriptor.webhooks is not None else None
    return Manifest(
        id=descriptor.id,
        slug=descriptor.slug,
        name=descriptor.name,
        version=descriptor.version,
        description=descriptor.description,
        author=descriptor.author,
        entry=descriptor.entry,
        checksum=descriptor.checksum,
        timestamp=descriptor.timestamp,
        requires_setup=descriptor.requires_setup,
        build_info=BuildInfo(cli_version=cli_version, build_date=descriptor.timestamp, validated=validated),
        icon=descriptor.icon or None,
        category=descriptor.category or None,
        tags=_or_none(list(descriptor.tags)),
        configuration_steps=_or_none([s.to_dict() for s in descriptor.configuration_steps]),
        providers=_or_none([p.to_dict() for p in descriptor.providers]),
        interfaces=_or_none(list(descriptor.interfaces)),
        permissions=_or_none(list(descriptor.permissions)),
        webhooks=webhooks or None,
        data_schema=descriptor.data_schema.to_dict() if descriptor.exposes_data else None,
    )
