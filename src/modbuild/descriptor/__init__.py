"""Descriptor extraction: recovering module metadata from source text."""

from modbuild.descriptor.extractor import DescriptorExtractor, sanitize_slug
from modbuild.descriptor.types import (
    BUNDLE_FILENAME,
    ORDER_UNSET,
    ConfigField,
    ConfigurationStep,
    DataCapability,
    DataField,
    DataSchema,
    DataSchemaDefinition,
    FieldType,
    ModuleDescriptor,
    ProviderRequirement,
    SelectOption,
    ValidationRule,
    WebhookBinding,
)

__all__ = [
    "DescriptorExtractor",
    "sanitize_slug",
    "BUNDLE_FILENAME",
    "ORDER_UNSET",
    "ConfigField",
    "ConfigurationStep",
    "DataCapability",
    "DataField",
    "DataSchema",
    "DataSchemaDefinition",
    "FieldType",
    "ModuleDescriptor",
    "ProviderRequirement",
    "SelectOption",
    "ValidationRule",
    "WebhookBinding",
]
