"""Configuration-step extraction."""

from __future__ import annotations

import logging
import re

from modbuild.descriptor.literals import (
    bool_value,
    key_block,
    literal_value,
    number_value,
    string_value,
)
from modbuild.descriptor.patterns import iter_field_literals, iter_step_literals
from modbuild.descriptor.types import (
    ORDER_UNSET,
    ConfigField,
    ConfigurationStep,
    DefaultValue,
    FieldType,
    SelectOption,
    ValidationRule,
)
from modbuild.scanning import iter_blocks

__all__ = ["StepExtractor", "coerce_default"]

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r"-?\d+(?:\.\d+)?$")


def coerce_default(field_type: FieldType, value: DefaultValue | None) -> DefaultValue | None:
    """Match a raw ``defaultValue`` literal to its field type.

    Values that cannot be represented in the field's type are dropped.
    """
    if value is None:
        return None
    if field_type is FieldType.NUMBER:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value
        text = value.strip()
        if not _NUMERIC.match(text):
            return None
        return float(text) if "." in text else int(text)
    if field_type is FieldType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class StepExtractor:
    """Reads ``new ConfigurationStep({...})`` literals out of a steps array body."""

    def extract(self, steps_content: str) -> list[ConfigurationStep]:
        steps: list[ConfigurationStep] = []
        for block in iter_step_literals(steps_content):
            steps.append(self.parse_step(block.inner))
        logger.debug("Extracted %d configuration steps", len(steps))
        return steps

    def parse_step(self, content: str) -> ConfigurationStep:
        order = number_value(content, "order")
        return ConfigurationStep(
            id=string_value(content, "id") or "",
            title=string_value(content, "title") or "",
            description=string_value(content, "description") or "",
            order=int(order) if order is not None else ORDER_UNSET,
            optional=bool_value(content, "optional") or False,
            fields=tuple(self.extract_fields(content)),
        )

    def extract_fields(self, step_content: str) -> list[ConfigField]:
        array = key_block(step_content, "fields", "[")
        if array is None:
            return []
        return [self.parse_field(class_name, block.inner) for class_name, block in iter_field_literals(array.inner)]

    def parse_field(self, class_name: str, content: str) -> ConfigField:
        field_type = FieldType.from_class_name(class_name)
        return ConfigField(
            type=field_type,
            name=string_value(content, "name") or "",
            label=string_value(content, "label") or "",
            description=string_value(content, "description") or "",
            placeholder=string_value(content, "placeholder") or "",
            default_value=coerce_default(field_type, literal_value(content, "defaultValue")),
            validation=self.extract_validation(field_type, content),
        )

    def extract_validation(self, field_type: FieldType, content: str) -> ValidationRule | None:
        required = False
        pattern = None
        custom_message = None
        block = key_block(content, "validation")
        if block is not None:
            required = bool_value(block.inner, "required") or False
            pattern = string_value(block.inner, "pattern")
            custom_message = string_value(block.inner, "customMessage")

        minimum = maximum = None
        if field_type is FieldType.NUMBER:
            minimum = number_value(content, "min")
            maximum = number_value(content, "max")
            if block is not None:
                minimum = minimum if minimum is not None else number_value(block.inner, "min")
                maximum = maximum if maximum is not None else number_value(block.inner, "max")

        options: tuple[SelectOption, ...] = ()
        if field_type is FieldType.SELECT:
            options = tuple(self.extract_options(content))

        rule = ValidationRule(
            required=required,
            pattern=pattern,
            custom_message=custom_message,
            min=minimum,
            max=maximum,
            options=options,
        )
        return None if rule.is_empty() else rule

    def extract_options(self, content: str) -> list[SelectOption]:
        array = key_block(content, "options", "[")
        if array is None:
            return []
        options = []
        for block in iter_blocks(array.inner, "{"):
            value = literal_value(block.inner, "value")
            label = string_value(block.inner, "label")
            if value is None:
                continue
            value_text = str(value).lower() if isinstance(value, bool) else str(value)
            options.append(SelectOption(value=value_text, label=label or value_text))
        return options
