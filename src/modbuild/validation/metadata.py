"""Descriptor checks: identity, permissions and exposed-data schema."""

from __future__ import annotations

from modbuild.descriptor.extractor import SEMVER
from modbuild.descriptor.types import DataSchema, FieldType, ModuleDescriptor
from modbuild.validation.types import ValidationReport

__all__ = [
    "VALID_PERMISSIONS",
    "VALID_DATA_TYPES",
    "VALID_SCHEMA_FIELD_TYPES",
    "VALID_DATA_CAPABILITIES",
    "validate_metadata",
    "validate_permissions",
    "validate_data_schema",
]

VALID_PERMISSIONS = frozenset({"storage:read", "storage:write", "ui:notifications", "ui:modals", "network:external"})

VALID_DATA_TYPES = frozenset(
    {
        "issue-tracker",
        "payment-system",
        "error-tracking",
        "deployment-system",
        "task-management",
        "communication",
        "analytics",
        "generic",
    }
)

VALID_SCHEMA_FIELD_TYPES = frozenset({"string", "number", "date", "boolean", "array", "object"})

VALID_DATA_CAPABILITIES = frozenset({"filterable", "sortable", "groupable", "aggregatable", "time-series"})


def validate_metadata(descriptor: ModuleDescriptor) -> ValidationReport:
    """Check identity fields and the configuration surface of a descriptor.

    Returns a report; identity problems are errors.
    """
    report = ValidationReport("metadata")

    if descriptor.id == 0:
        report.error("id_missing", "Module id is required", subject="id")
    if not descriptor.name:
        report.error("name_missing", "Module name is required", subject="name")
    if not SEMVER.match(descriptor.version):
        report.error("version_invalid", f"'{descriptor.version}' is not a semantic version", subject="version")
    if not descriptor.slug:
        report.error("slug_missing", "Module slug is required", subject="slug")

    for index, step in enumerate(descriptor.configuration_steps):
        label = step.id or f"#{index + 1}"
        if not step.id:
            report.advisory("step_id_missing", f"Configuration step {label} has no id", subject=label)
        seen: set[str] = set()
        for config_field in step.fields:
            if not config_field.name:
                report.advisory(
                    "field_name_missing",
                    f"A {config_field.type.value} field in step {label} has no name",
                    subject=label,
                )
                continue
            if config_field.name in seen:
                report.advisory(
                    "field_name_duplicate",
                    f"Field '{config_field.name}' appears twice in step {label}",
                    subject=config_field.name,
                )
            seen.add(config_field.name)
            if config_field.type is FieldType.SELECT and (
                config_field.validation is None or not config_field.validation.options
            ):
                report.advisory(
                    "select_without_options",
                    f"Select field '{config_field.name}' declares no options",
                    subject=config_field.name,
                )
    return report


def validate_permissions(permissions: tuple[str, ...] | list[str]) -> ValidationReport:
    """Unknown permissions are reported as advisories, never as errors."""
    report = ValidationReport("permissions")
    for permission in permissions:
        if permission not in VALID_PERMISSIONS:
            report.advisory("unknown_permission", f"Unknown permission '{permission}'", subject=permission)
    return report


def validate_data_schema(schema: DataSchema | None) -> ValidationReport:
    report = ValidationReport("data_schema")
    if schema is None or not schema.expose_data:
        return report

    if schema.data_type is None:
        report.advisory("data_type_missing", "No data type specified (using 'generic')")
    elif schema.data_type not in VALID_DATA_TYPES:
        report.error("data_type_invalid", f"Invalid data type: {schema.data_type}", subject=schema.data_type)

    definition = schema.schema
    if definition is None:
        return report

    if not definition.fields:
        report.advisory("schema_fields_missing", "Schema defined but no fields found")
    for data_field in definition.fields:
        if data_field.type not in VALID_SCHEMA_FIELD_TYPES:
            report.error(
                "field_type_invalid",
                f"Invalid field type '{data_field.type}' for field '{data_field.name}'",
                subject=data_field.name,
            )
    for capability in definition.capabilities:
        if capability.name not in VALID_DATA_CAPABILITIES:
            report.advisory("unknown_capability", f"Unknown capability '{capability.name}'", subject=capability.name)
    return report
