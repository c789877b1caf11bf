"""Capability check: declared interfaces must be implemented by the component."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Iterable, Mapping

from modbuild.descriptor.literals import key_block, top_level_keys
from modbuild.descriptor.patterns import handlers_object
from modbuild.validation.types import ValidationReport

__all__ = ["DEFAULT_METHOD_TABLE", "CapabilityValidator", "normalize_interface"]

logger = logging.getLogger(__name__)

INTERFACES_HOOK = "useModuleInterfaces"

DEFAULT_METHOD_TABLE: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "ISearchable": ("search", "getSearchResults", "getSearchFilters", "translateUQLQuery", "getUQLCapabilities"),
        "IRefreshable": ("refresh", "getLastRefresh", "setAutoRefresh"),
        "IExportable": ("export", "getSupportedFormats", "exportData"),
        "IFilterable": ("applyFilter", "clearFilters", "getCurrentFilter", "translateUQLQuery", "getUQLCapabilities"),
        "IThemeable": ("applyTheme", "getThemeConfig", "getSupportedThemes"),
        "INotifiable": ("sendNotification", "subscribe", "unsubscribe"),
        "IDataProvider": ("getData", "getDataSchema", "subscribe"),
        "ISchedulable": ("schedule", "unschedule", "getSchedule"),
    }
)

_MARKER = re.compile(r"^I[A-Z]")


def normalize_interface(name: str) -> str:
    """Case-insensitive key with the interface marker prefix removed.

    ``ISearchable``, ``Searchable`` and ``SEARCHABLE`` all map to ``searchable``.
    """
    if _MARKER.match(name):
        name = name[1:]
    return name.lower()


class CapabilityValidator:
    """Proves declared capability interfaces are implemented with their required methods.

    Args:
        method_table: Interface name to required method names. Keys are
            matched through ``normalize_interface``.
    """

    def __init__(self, method_table: Mapping[str, Iterable[str]] | None = None) -> None:
        table = DEFAULT_METHOD_TABLE if method_table is None else method_table
        self._methods: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {normalize_interface(name): tuple(methods) for name, methods in table.items()}
        )

    def required_methods(self, interface: str) -> tuple[str, ...] | None:
        return self._methods.get(normalize_interface(interface))

    def check(self, declared: Iterable[str], component_source: str | None) -> ValidationReport:
        """Validate ``declared`` interface names against the component source.

        Declaring no interfaces yields an empty report.
        """
        report = ValidationReport("capabilities")
        declared = list(declared)
        if not declared:
            return report

        if component_source is None:
            report.error("component_missing", "Component file not found; declared interfaces cannot be verified")
            return report
        if INTERFACES_HOOK not in component_source:
            report.error("hook_missing", f"Component does not use the {INTERFACES_HOOK} hook")
            return report

        match, _ = handlers_object(component_source)
        if match.block is None:
            report.error("handlers_missing", "handlers object not found in component")
            return report
        handlers = match.block.inner

        implemented = [key for key in top_level_keys(handlers) if _MARKER.match(key)]
        implemented_keys = {normalize_interface(key) for key in implemented}

        for name in declared:
            if normalize_interface(name) not in implemented_keys:
                report.error(
                    "not_implemented",
                    f"Interface {name} is declared by the module but not implemented in the component",
                    subject=name,
                )

        for key in implemented:
            self._check_methods(report, handlers, key)

        if report.ok:
            logger.info("All %d declared interfaces implemented", len(declared))
        return report

    def _check_methods(self, report: ValidationReport, handlers: str, key: str) -> None:
        methods = self.required_methods(key)
        if methods is None:
            report.advisory("unknown_interface", f"Unknown interface {key}; skipping method validation", subject=key)
            return

        block = key_block(handlers, key)
        if block is None:
            report.warning(
                "interface_block_missing",
                f"Could not locate the handler object for {key}",
                subject=key,
            )
            return

        present = set(top_level_keys(block.inner))
        missing = [m for m in methods if m not in present]
        if missing:
            report.error(
                "missing_methods",
                f"Interface {key} is missing required methods: {', '.join(missing)}",
                subject=key,
            )
