"""Provider requirement, interface and webhook-binding extraction."""

from __future__ import annotations

import logging
import re

from modbuild.descriptor.literals import (
    array_strings,
    bool_value,
    find_key,
    key_block,
    string_list,
    string_value,
)
from modbuild.descriptor.types import ProviderRequirement, WebhookBinding, ordered_unique
from modbuild.scanning import iter_blocks

__all__ = ["ProviderExtractor", "provider_token", "interface_tokens", "webhook_binding"]

logger = logging.getLogger(__name__)

_PROVIDER_ENUM = re.compile(r"Provider\.(\w+)")
_INTERFACE_TOKEN = re.compile(r"ModuleInterfaces\.(\w+)")


def provider_token(content: str, key: str = "provider") -> str | None:
    """Provider bound to ``key``, as ``Provider.GITHUB`` (lower-cased) or a string literal."""
    pos = find_key(content, key)
    if pos is None:
        return None
    m = _PROVIDER_ENUM.match(content, pos)
    if m is not None:
        return m.group(1).lower()
    return string_value(content, key)


def interface_tokens(array_content: str) -> tuple[str, ...]:
    """Bare names of the ``ModuleInterfaces.X`` tokens in an interfaces array."""
    names = [m.group(1) for m in _INTERFACE_TOKEN.finditer(array_content)]
    if not names:
        names = string_list(array_content)
    return ordered_unique(names)


def webhook_binding(options_content: str) -> WebhookBinding | None:
    """The ``webhooks: {...}`` sub-object of a module options literal."""
    block = key_block(options_content, "webhooks")
    if block is None:
        return None
    content = block.inner
    binding = WebhookBinding(
        provider=provider_token(content) or "",
        events=ordered_unique(array_strings(content, "events") or []),
        config_fields=ordered_unique(array_strings(content, "configFields") or []),
    )
    if not binding.provider and not binding.events and not binding.config_fields:
        return None
    return binding


class ProviderExtractor:
    """Reads provider requirement objects out of a providers array body."""

    def extract(self, providers_content: str) -> list[ProviderRequirement]:
        providers: list[ProviderRequirement] = []
        for block in iter_blocks(providers_content, "{"):
            provider = self.parse_provider(block.inner)
            if provider is not None:
                providers.append(provider)
        logger.debug("Extracted %d provider requirements", len(providers))
        return providers

    def parse_provider(self, content: str) -> ProviderRequirement | None:
        name = provider_token(content)
        if not name:
            return None
        required = bool_value(content, "required")
        return ProviderRequirement(
            name=name,
            required=True if required is None else required,
            scopes=ordered_unique(array_strings(content, "scopes") or []),
            description=string_value(content, "description") or "",
        )
