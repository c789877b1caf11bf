"""Tests for the capability-implementation check."""

from __future__ import annotations

import pytest

from modbuild.validation.capabilities import DEFAULT_METHOD_TABLE, CapabilityValidator, normalize_interface
from modbuild.validation.types import Severity

SEARCHABLE_WITHOUT_FILTERS = """
const handlers = {
  ISearchable: {
    search: async (query: string) => [],
    getSearchResults: () => [],
    translateUQLQuery: (q: string) => q,
    getUQLCapabilities: () => [],
  },
} satisfies InterfaceHandlers;
useModuleInterfaces(module, handlers);
"""


class TestNormalizeInterface:
    @pytest.mark.parametrize("name", ["ISearchable", "Searchable", "searchable", "SEARCHABLE"])
    def test_variants(self, name: str) -> None:
        assert normalize_interface(name) == "searchable"

    def test_lone_i_is_kept(self) -> None:
        assert normalize_interface("Item") == "item"


class TestCapabilityValidator:
    def test_no_interfaces_is_empty_report(self) -> None:
        report = CapabilityValidator().check([], None)
        assert report.issues == []
        assert report.ok

    def test_full_component_passes(self, full_component: str) -> None:
        report = CapabilityValidator().check(["ISearchable", "IRefreshable"], full_component)
        assert report.ok
        assert report.issues == []

    def test_missing_method_named_exactly(self) -> None:
        report = CapabilityValidator().check(["Searchable"], SEARCHABLE_WITHOUT_FILTERS)
        assert len(report.errors) == 1
        issue = report.errors[0]
        assert issue.code == "missing_methods"
        assert issue.subject == "ISearchable"
        assert issue.message == "Interface ISearchable is missing required methods: getSearchFilters"

    def test_declared_but_not_implemented(self, full_component: str) -> None:
        report = CapabilityValidator().check(["IExportable"], full_component)
        assert report.subjects("not_implemented") == ["IExportable"]

    def test_component_missing(self) -> None:
        report = CapabilityValidator().check(["ISearchable"], None)
        assert [i.code for i in report.errors] == ["component_missing"]

    def test_hook_missing(self) -> None:
        report = CapabilityValidator().check(["ISearchable"], "const handlers = { ISearchable: {} };")
        assert [i.code for i in report.errors] == ["hook_missing"]

    def test_handlers_missing(self) -> None:
        report = CapabilityValidator().check(["ISearchable"], "useModuleInterfaces(module, {});")
        assert [i.code for i in report.errors] == ["handlers_missing"]

    def test_unknown_interface_is_advisory(self) -> None:
        component = "useModuleInterfaces(m, handlers);\nconst handlers = { ICustom: { run: () => 1 } };"
        report = CapabilityValidator().check(["ICustom"], component)
        assert report.ok
        assert [(i.severity, i.code) for i in report.issues] == [(Severity.ADVISORY, "unknown_interface")]

    def test_injected_method_table(self) -> None:
        component = "useModuleInterfaces(m, handlers);\nconst handlers = { ICustom: { run: () => 1 } };"
        validator = CapabilityValidator({"Custom": ("run", "stop")})
        report = validator.check(["Custom"], component)
        assert report.errors[0].message == "Interface ICustom is missing required methods: stop"
        assert validator.required_methods("ICustom") == ("run", "stop")

    def test_commented_handlers(self) -> None:
        component = (
            "useModuleInterfaces(module, handlers);\n"
            "const handlers = {\n"
            "  // refresh support\n"
            "  IRefreshable: {\n"
            "    /* manual */ refresh: async () => undefined,\n"
            "    // timestamps\n"
            "    getLastRefresh: () => null,\n"
            "    setAutoRefresh: (enabled: boolean) => undefined,\n"
            "  },\n"
            "};\n"
        )
        report = CapabilityValidator().check(["IRefreshable"], component)
        assert report.issues == []

    def test_default_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_METHOD_TABLE["IExtra"] = ("x",)  # type: ignore[index]
