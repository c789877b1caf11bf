"""Descriptor types: ModuleDescriptor and the sections it is assembled from."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Union

__all__ = [
    "BUNDLE_FILENAME",
    "ORDER_UNSET",
    "FieldType",
    "FIELD_CLASS_TYPES",
    "DefaultValue",
    "SelectOption",
    "ValidationRule",
    "ConfigField",
    "ConfigurationStep",
    "ProviderRequirement",
    "WebhookBinding",
    "DataField",
    "DataCapability",
    "DataSchemaDefinition",
    "DataSchema",
    "ModuleDescriptor",
    "ordered_unique",
]

BUNDLE_FILENAME = "bundle.js"
ORDER_UNSET = -1

DefaultValue = Union[str, int, float, bool]


class FieldType(str, Enum):
    """Configuration field types understood by the host."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    BOOLEAN = "boolean"
    PASSWORD = "password"
    URL = "url"
    DATE = "date"
    COLOR = "color"
    EMAIL = "email"

    @classmethod
    def from_class_name(cls, class_name: str) -> FieldType:
        """Map a field constructor name (``NumberField``) to its type; unknown names are text."""
        return FIELD_CLASS_TYPES.get(class_name, cls.TEXT)


FIELD_CLASS_TYPES: dict[str, FieldType] = {
    "TextField": FieldType.TEXT,
    "NumberField": FieldType.NUMBER,
    "SelectField": FieldType.SELECT,
    "BooleanField": FieldType.BOOLEAN,
    "PasswordField": FieldType.PASSWORD,
    "UrlField": FieldType.URL,
    "DateField": FieldType.DATE,
    "ColorField": FieldType.COLOR,
    "EmailField": FieldType.EMAIL,
}


def ordered_unique(values: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates while keeping first-seen order."""
    seen: dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return tuple(seen)


def _put(target: dict[str, Any], key: str, value: Any) -> None:
    if value is None or value == "" or value == () or value == []:
        return
    target[key] = value


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True)
class ValidationRule:
    """Inline validation attached to a configuration field."""

    required: bool = False
    pattern: str | None = None
    custom_message: str | None = None
    min: int | float | None = None
    max: int | float | None = None
    options: tuple[SelectOption, ...] = ()

    def is_empty(self) -> bool:
        return (
            not self.required
            and self.pattern is None
            and self.custom_message is None
            and self.min is None
            and self.max is None
            and not self.options
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.required:
            result["required"] = True
        _put(result, "pattern", self.pattern)
        _put(result, "customMessage", self.custom_message)
        _put(result, "min", self.min)
        _put(result, "max", self.max)
        _put(result, "options", [o.to_dict() for o in self.options])
        return result


@dataclass(frozen=True)
class ConfigField:
    """A single input field inside a configuration step."""

    type: FieldType
    name: str = ""
    label: str = ""
    description: str = ""
    placeholder: str = ""
    default_value: DefaultValue | None = None
    validation: ValidationRule | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type.value}
        _put(result, "name", self.name)
        _put(result, "label", self.label)
        _put(result, "description", self.description)
        _put(result, "placeholder", self.placeholder)
        _put(result, "defaultValue", self.default_value)
        if self.validation is not None and not self.validation.is_empty():
            result["validation"] = self.validation.to_dict()
        return result


@dataclass(frozen=True)
class ConfigurationStep:
    """One step of the module setup wizard.

    ``order`` keeps the ORDER_UNSET sentinel when the source does not specify
    one; orders are neither unique nor contiguous.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    order: int = ORDER_UNSET
    optional: bool = False
    fields: tuple[ConfigField, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        _put(result, "id", self.id)
        _put(result, "title", self.title)
        _put(result, "description", self.description)
        if self.order != ORDER_UNSET:
            result["order"] = self.order
        if self.optional:
            result["optional"] = True
        _put(result, "fields", [f.to_dict() for f in self.fields])
        return result


@dataclass(frozen=True)
class ProviderRequirement:
    """An external provider the module needs an account connection for."""

    name: str
    required: bool = True
    scopes: tuple[str, ...] = ()
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "required": self.required}
        _put(result, "scopes", list(self.scopes))
        _put(result, "description", self.description)
        return result


@dataclass(frozen=True)
class WebhookBinding:
    """Declared webhook provider, events and configuration fields."""

    provider: str = ""
    events: tuple[str, ...] = ()
    config_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        _put(result, "provider", self.provider)
        _put(result, "events", list(self.events))
        _put(result, "configFields", list(self.config_fields))
        return result


@dataclass(frozen=True)
class DataField:
    name: str
    type: str
    description: str = ""
    nullable: bool = False
    example: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "type": self.type}
        _put(result, "description", self.description)
        if self.nullable:
            result["nullable"] = True
        _put(result, "example", self.example)
        return result


@dataclass(frozen=True)
class DataCapability:
    name: str
    fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "fields": list(self.fields)}


@dataclass(frozen=True)
class DataSchemaDefinition:
    fields: tuple[DataField, ...] = ()
    capabilities: tuple[DataCapability, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "capabilities": [c.to_dict() for c in self.capabilities],
        }


@dataclass(frozen=True)
class DataSchema:
    """Data a module exposes to the host through the data-binding hook."""

    expose_data: bool = False
    data_type: str | None = None
    schema: DataSchemaDefinition | None = None
    computed_fields: tuple[str, ...] = ()

    @property
    def effective_data_type(self) -> str:
        return self.data_type or "generic"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "exposeData": self.expose_data,
            "dataType": self.effective_data_type,
        }
        if self.schema is not None:
            result["schema"] = self.schema.to_dict()
        _put(result, "computedFields", list(self.computed_fields))
        return result


@dataclass(frozen=True)
class ModuleDescriptor:
    """Structured metadata recovered from a module's source text.

    Created fresh per build and never mutated; later passes derive new
    instances with ``dataclasses.replace``.
    """

    id: int
    name: str
    slug: str
    version: str = "1.0.0"
    description: str = ""
    author: str = ""
    icon: str | None = None
    category: str | None = None
    tags: tuple[str, ...] = ()
    configuration_steps: tuple[ConfigurationStep, ...] = ()
    providers: tuple[ProviderRequirement, ...] = ()
    interfaces: tuple[str, ...] = ()
    webhooks: WebhookBinding | None = None
    permissions: tuple[str, ...] = ()
    data_schema: DataSchema | None = None
    checksum: str | None = None
    timestamp: str | None = None
    entry: str = field(default=BUNDLE_FILENAME)

    @property
    def requires_setup(self) -> bool:
        return len(self.configuration_steps) > 0

    @property
    def exposes_data(self) -> bool:
        return self.data_schema is not None and self.data_schema.expose_data
