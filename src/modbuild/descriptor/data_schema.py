"""Exposed-data schema extraction from the data-binding hook call."""

from __future__ import annotations

import logging

from modbuild.descriptor.literals import (
    array_strings,
    bool_value,
    key_block,
    literal_value,
    string_value,
    top_level_keys,
)
from modbuild.descriptor.patterns import find_data_provider_call
from modbuild.descriptor.types import (
    DataCapability,
    DataField,
    DataSchema,
    DataSchemaDefinition,
    ordered_unique,
)
from modbuild.scanning import iter_blocks

__all__ = ["DataSchemaExtractor"]

logger = logging.getLogger(__name__)


class DataSchemaExtractor:
    """Reads ``useDataProvider('type', {payload}, {metadata})`` calls.

    ``extract`` returns None when the source never calls the hook. When the
    call is present but its arguments are not the expected literals, a
    schema with ``expose_data=True`` and nothing else is returned and the
    reason is appended to ``diagnostics``.
    """

    def __init__(self) -> None:
        self.diagnostics: list[str] = []

    def extract(self, source: str) -> DataSchema | None:
        call = find_data_provider_call(source)
        if call is None:
            return None
        logger.debug("Found useDataProvider call; extracting data schema")

        payload = call.arg_block(source, 1)
        metadata = call.arg_block(source, 2)
        if payload is None or metadata is None:
            self.diagnostics.append(
                "useDataProvider call found but its payload and metadata arguments are not object literals"
            )
            return DataSchema(expose_data=True)

        return DataSchema(
            expose_data=True,
            data_type=string_value(metadata.inner, "type"),
            schema=self.extract_definition(payload.inner),
            computed_fields=self.extract_computed(payload.inner),
        )

    def extract_definition(self, payload: str) -> DataSchemaDefinition | None:
        block = key_block(payload, "schema")
        if block is None:
            return None
        fields_block = key_block(block.inner, "fields", "[")
        caps_block = key_block(block.inner, "capabilities", "[")
        fields = self.extract_fields(fields_block.inner) if fields_block is not None else []
        capabilities = self.extract_capabilities(caps_block.inner) if caps_block is not None else []
        return DataSchemaDefinition(fields=tuple(fields), capabilities=tuple(capabilities))

    def extract_fields(self, content: str) -> list[DataField]:
        fields = []
        for block in iter_blocks(content, "{"):
            name = string_value(block.inner, "name")
            field_type = string_value(block.inner, "type")
            if not name or not field_type:
                continue
            example = literal_value(block.inner, "example")
            fields.append(
                DataField(
                    name=name,
                    type=field_type,
                    description=string_value(block.inner, "description") or "",
                    nullable=bool_value(block.inner, "nullable") or False,
                    example="" if example is None else str(example),
                )
            )
        return fields

    def extract_capabilities(self, content: str) -> list[DataCapability]:
        capabilities = []
        for block in iter_blocks(content, "{"):
            name = string_value(block.inner, "name")
            if not name:
                continue
            fields = array_strings(block.inner, "fields") or []
            capabilities.append(DataCapability(name=name, fields=tuple(fields)))
        return capabilities

    def extract_computed(self, payload: str) -> tuple[str, ...]:
        block = key_block(payload, "computed")
        if block is None:
            return ()
        return ordered_unique(top_level_keys(block.inner))
