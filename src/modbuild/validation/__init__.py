"""Validators that cross-check a descriptor against its implementation."""

from modbuild.validation.capabilities import DEFAULT_METHOD_TABLE, CapabilityValidator, normalize_interface
from modbuild.validation.metadata import validate_data_schema, validate_metadata, validate_permissions
from modbuild.validation.types import Severity, ValidationIssue, ValidationReport
from modbuild.validation.webhooks import WebhookValidator, handler_method_name

__all__ = [
    "DEFAULT_METHOD_TABLE",
    "CapabilityValidator",
    "normalize_interface",
    "validate_data_schema",
    "validate_metadata",
    "validate_permissions",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "WebhookValidator",
    "handler_method_name",
]
