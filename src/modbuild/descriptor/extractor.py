"""DescriptorExtractor: recovers a ModuleDescriptor from module source text."""

from __future__ import annotations

import dataclasses
import logging
import re

from modbuild.descriptor.data_schema import DataSchemaExtractor
from modbuild.descriptor.literals import (
    array_strings,
    number_value,
    string_list,
    string_value,
)
from modbuild.descriptor.patterns import (
    CallSite,
    PatternMatch,
    bound_array,
    find_module_constructor,
    identity_options,
    module_options,
    permissions_array,
)
from modbuild.descriptor.providers import ProviderExtractor, interface_tokens, webhook_binding
from modbuild.descriptor.steps import StepExtractor
from modbuild.descriptor.types import (
    ConfigurationStep,
    DataSchema,
    ModuleDescriptor,
    ProviderRequirement,
    WebhookBinding,
    ordered_unique,
)
from modbuild.errors import MetadataError
from modbuild.scanning import Block

__all__ = ["DescriptorExtractor", "sanitize_slug", "SEMVER"]

logger = logging.getLogger(__name__)

SEMVER = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_NON_SLUG = re.compile(r"[^a-z0-9]+")

STEPS_ARG = 2
PROVIDERS_ARG = 3
INTERFACES_ARG = 4


def sanitize_slug(name: str) -> str:
    """Lower-kebab form of a display name (``"My Module!"`` -> ``"my-module"``)."""
    slug = name.lower().replace("@", "")
    slug = _NON_SLUG.sub("-", slug)
    return slug.strip("-")


class DescriptorExtractor:
    """Runs the extraction passes over one module's sources.

    Every optional pass is tolerant of absence and returns an empty result;
    when a partial shape was seen but could not be recovered, the reason is
    appended to ``diagnostics``. Only ``extract_identity`` raises.

    Args:
        module_source: Text of the module declaration file.
        component_source: Text of the UI component file, if any.
        hooks_source: Text of a data hooks file, used when the component
            does not call the data-binding hook.
    """

    def __init__(
        self,
        module_source: str,
        component_source: str | None = None,
        hooks_source: str | None = None,
    ) -> None:
        self.module_source = module_source
        self.component_source = component_source
        self.hooks_source = hooks_source
        self.diagnostics: list[str] = []
        self._constructor: CallSite | None = None
        self._constructor_searched = False

    def _note(self, section: str, reason: str | None) -> None:
        if not reason:
            return
        message = f"{section}: {reason}"
        logger.debug("Extraction diagnostic: %s", message)
        self.diagnostics.append(message)

    def _module_call(self) -> CallSite | None:
        if not self._constructor_searched:
            self._constructor = find_module_constructor(self.module_source)
            self._constructor_searched = True
        return self._constructor

    def _options(self) -> PatternMatch:
        match = identity_options(self.module_source)
        if match:
            return match
        fallback = module_options(self.module_source)
        if fallback:
            self._note("identity", match.reason)
            return fallback
        return match

    def _constructor_array(self, section: str, index: int) -> Block | None:
        """Array passed positionally to the module constructor, inline or via a variable."""
        call = self._module_call()
        if call is None:
            self._note(section, "no module constructor call found")
            return None
        inline = call.arg_block(self.module_source, index, "[")
        if inline is not None:
            return inline
        arg = call.arg_text(self.module_source, index)
        if not arg:
            return None
        if not _IDENTIFIER.match(arg):
            self._note(section, f"constructor argument '{arg}' is neither an identifier nor an array literal")
            return None
        match = bound_array(self.module_source, arg)
        if not match:
            self._note(section, match.reason)
            return None
        return match.block

    # -- passes ---------------------------------------------------------

    def extract_identity(self) -> ModuleDescriptor:
        """Identity fields from the factory's options literal.

        Raises:
            MetadataError: If id, name, version or slug is missing or malformed.
        """
        match = self._options()
        if match.block is None:
            raise MetadataError("id", match.reason or "module options literal not found")
        content = match.block.inner

        module_id = number_value(content, "id")
        if module_id is None:
            raw = string_value(content, "id")
            if raw is not None and raw.isdigit():
                module_id = int(raw)
        if module_id is None:
            raise MetadataError("id", "missing")
        if isinstance(module_id, float) and not module_id.is_integer():
            raise MetadataError("id", f"must be an integer, got {module_id}")
        module_id = int(module_id)
        if module_id == 0:
            raise MetadataError("id", "must be nonzero")

        name = string_value(content, "name")
        if not name:
            raise MetadataError("name", "missing or empty")

        version = string_value(content, "version") or "1.0.0"
        if not SEMVER.match(version):
            raise MetadataError("version", f"'{version}' is not a semantic version")

        slug = string_value(content, "slug") or sanitize_slug(name)
        if not slug:
            raise MetadataError("slug", f"cannot derive a slug from name '{name}'")

        return ModuleDescriptor(
            id=module_id,
            name=name,
            slug=slug,
            version=version,
            description=string_value(content, "description") or "",
            author=string_value(content, "author") or "",
            icon=string_value(content, "icon"),
            category=string_value(content, "category"),
            tags=ordered_unique(array_strings(content, "tags") or []),
        )

    def extract_configuration_steps(self) -> tuple[ConfigurationStep, ...]:
        block = self._constructor_array("configuration_steps", STEPS_ARG)
        if block is None:
            return ()
        return tuple(StepExtractor().extract(block.inner))

    def extract_providers(self) -> tuple[ProviderRequirement, ...]:
        block = self._constructor_array("providers", PROVIDERS_ARG)
        if block is None:
            return ()
        return tuple(ProviderExtractor().extract(block.inner))

    def extract_interfaces(self) -> tuple[str, ...]:
        block = self._constructor_array("interfaces", INTERFACES_ARG)
        if block is None:
            return ()
        return interface_tokens(block.inner)

    def extract_webhooks(self) -> WebhookBinding | None:
        match = self._options()
        if match.block is None:
            return None
        binding = webhook_binding(match.block.inner)
        if binding is None:
            alt = module_options(self.module_source)
            if alt.block is not None and alt.block != match.block:
                binding = webhook_binding(alt.block.inner)
        return binding

    def extract_permissions(self) -> tuple[str, ...]:
        match = permissions_array(self.module_source)
        if match.block is None:
            if "getPermissions" in self.module_source:
                self._note("permissions", match.reason)
            return ()
        return ordered_unique(string_list(match.block.inner))

    def extract_data_schema(self) -> DataSchema | None:
        extractor = DataSchemaExtractor()
        schema = None
        for source in (self.component_source, self.hooks_source):
            if not source:
                continue
            schema = extractor.extract(source)
            if schema is not None:
                break
        for reason in extractor.diagnostics:
            self._note("data_schema", reason)
        return schema

    def extract(self) -> ModuleDescriptor:
        """Run identity first, then every optional pass."""
        descriptor = self.extract_identity()
        return dataclasses.replace(
            descriptor,
            configuration_steps=self.extract_configuration_steps(),
            providers=self.extract_providers(),
            interfaces=self.extract_interfaces(),
            webhooks=self.extract_webhooks(),
            permissions=self.extract_permissions(),
            data_schema=self.extract_data_schema(),
        )
