"""Tests for exposed-data schema extraction."""

from __future__ import annotations

from modbuild.descriptor.data_schema import DataSchemaExtractor


class TestDataSchemaExtractor:
    def test_full_schema(self, full_component: str) -> None:
        schema = DataSchemaExtractor().extract(full_component)
        assert schema is not None
        assert schema.expose_data is True
        assert schema.data_type == "issue-tracker"
        assert [f.name for f in schema.schema.fields] == ["title", "createdAt"]
        assert [f.type for f in schema.schema.fields] == ["string", "date"]
        assert schema.schema.fields[1].nullable is True
        assert schema.schema.fields[1].example == "2024-01-01"
        assert [(c.name, c.fields) for c in schema.schema.capabilities] == [
            ("filterable", ("title",)),
            ("sortable", ("createdAt",)),
        ]
        assert schema.computed_fields == ("openCount", "closedCount")

    def test_no_call_returns_none(self) -> None:
        assert DataSchemaExtractor().extract("export default function C() { return null; }") is None

    def test_non_literal_arguments_record_diagnostic(self) -> None:
        extractor = DataSchemaExtractor()
        schema = extractor.extract("useDataProvider('issues', payload, meta);")
        assert schema is not None
        assert schema.expose_data is True
        assert schema.schema is None
        assert len(extractor.diagnostics) == 1

    def test_fields_without_name_or_type_are_skipped(self) -> None:
        source = """
        useDataProvider('x', {
            schema: { fields: [{ name: 'a' }, { type: 'string' }, { name: 'b', type: 'number' }] },
        }, {});
        """
        schema = DataSchemaExtractor().extract(source)
        assert [f.name for f in schema.schema.fields] == ["b"]
        assert schema.data_type is None
        assert schema.effective_data_type == "generic"

    def test_to_dict(self, full_component: str) -> None:
        data = DataSchemaExtractor().extract(full_component).to_dict()
        assert data["exposeData"] is True
        assert data["dataType"] == "issue-tracker"
        assert data["computedFields"] == ["openCount", "closedCount"]
        assert data["schema"]["fields"][0] == {"name": "title", "type": "string", "description": "Issue title"}
