"""Webhook binding checks: configuration, handler registration and component usage."""

from __future__ import annotations

import logging
import re

from modbuild.descriptor.types import WebhookBinding
from modbuild.scanning import extract_block
from modbuild.validation.types import ValidationReport

__all__ = ["VALID_PROVIDERS", "WebhookValidator", "handler_method_name"]

logger = logging.getLogger(__name__)

VALID_PROVIDERS = frozenset(
    {"github", "gitlab", "google", "slack", "stripe", "twilio", "discord", "linear", "notion", "airtable"}
)

BASE_CLASS = "BaseModule"
EVENT_TYPE = "WebhookEvent"

_EVENT_FORMAT = re.compile(r"^[a-z][a-z0-9_]*$")
_REGISTRATION = re.compile(r"""this\.registerWebhookHandler\(\s*['"]([^'"]+)['"]""")
_HANDLER_METHOD = re.compile(r"handle\w+Event\s*\([^)]*\)\s*(?::\s*[\w<>\[\]|. ]+)?\s*\{")
_WEBHOOK_HOOK_CALL = re.compile(r"use(?:Webhook|WebhookEvents)\s*(?:<[^>(]*>)?\s*\(")


def handler_method_name(event: str) -> str:
    """Conventional handler for an event: ``pull_request`` -> ``handlePullRequestEvent``."""
    pascal = "".join(part[:1].upper() + part[1:] for part in event.split("_") if part)
    return f"handle{pascal}Event"


class WebhookValidator:
    """Validates a declared webhook binding against the module and component sources."""

    def validate_configuration(self, binding: WebhookBinding) -> ValidationReport:
        report = ValidationReport("webhook_configuration")

        if not binding.provider:
            report.error("provider_missing", "Webhook provider is required in webhooks")
        elif binding.provider.lower() not in VALID_PROVIDERS:
            report.error(
                "provider_unknown",
                f"Webhook provider '{binding.provider}' is not a known provider",
                subject=binding.provider,
            )

        if not binding.events:
            report.error("events_missing", "Webhook events array is required and cannot be empty")
        for event in binding.events:
            if not event.strip():
                report.error("event_empty", "Empty event found in webhooks.events")
            elif not _EVENT_FORMAT.match(event):
                report.advisory(
                    "event_format",
                    f"Event '{event}' should use lowercase with underscores (e.g. 'pull_request')",
                    subject=event,
                )

        if not binding.config_fields:
            report.advisory(
                "config_fields_missing",
                "No configFields specified; webhooks usually need fields such as ['owner', 'repo']",
            )
        for name in binding.config_fields:
            if not name.strip():
                report.error("config_field_empty", "Empty config field found in webhooks.configFields")
        return report

    def validate_implementation(self, binding: WebhookBinding, module_source: str) -> ValidationReport:
        report = ValidationReport("webhook_implementation")

        if f"extends {BASE_CLASS}" not in module_source:
            report.error("base_class_missing", f"Module must extend {BASE_CLASS} to use webhooks")

        registered = {m.group(1) for m in _REGISTRATION.finditer(module_source)}
        for event in binding.events:
            if event not in registered:
                report.warning(
                    "handler_not_registered",
                    f"Event '{event}' is declared but no handler is registered for it",
                    subject=event,
                )

        for event in binding.events:
            method = handler_method_name(event)
            signature = re.compile(re.escape(method) + r"\s*\([^)]*:\s*" + EVENT_TYPE + r"\b")
            if not signature.search(module_source):
                report.warning(
                    "handler_method_missing",
                    f"Expected handler method '{method}(event: {EVENT_TYPE})' not found",
                    subject=event,
                )

        if EVENT_TYPE not in module_source:
            report.error("event_type_missing", f"{EVENT_TYPE} type is never referenced in the module")
        return report

    def validate_component_usage(self, binding: WebhookBinding, component_source: str | None) -> ValidationReport:
        """Best-effort: never produces anything stronger than an advisory."""
        report = ValidationReport("webhook_component_usage")
        if component_source is None:
            report.advisory("component_missing", "Component file not found; skipping webhook usage check")
            return report

        if "useWebhook" not in component_source:
            report.advisory("hook_missing", "No webhook hooks (useWebhookEvents/useWebhook) used in the component")
            return report
        if not _WEBHOOK_HOOK_CALL.search(component_source):
            report.advisory("hook_unused", "Webhook hooks imported but never called in the component")

        for event in binding.events:
            if f"'{event}" not in component_source and f'"{event}' not in component_source:
                report.advisory(
                    "event_unhandled",
                    f"Event '{event}' is not referenced in the component",
                    subject=event,
                )
        return report

    def check_security(self, module_source: str) -> ValidationReport:
        """Hygiene recommendations for webhook handlers; advisories only."""
        report = ValidationReport("webhook_security")

        for m in _HANDLER_METHOD.finditer(module_source):
            body = extract_block(module_source, m.end() - 1)
            if body is not None and "try" not in body.inner and "catch" not in body.inner:
                report.advisory("no_error_handling", "Webhook handlers should use try/catch for error handling")
                break

        if "event.data" not in module_source:
            report.advisory("no_data_validation", "Webhook handlers should validate event.data before processing")
        if "this.emit" not in module_source:
            report.advisory("no_emit", "Consider using this.emit() to notify the component of webhook events")
        return report

    def validate(
        self,
        binding: WebhookBinding,
        module_source: str,
        component_source: str | None = None,
    ) -> ValidationReport:
        """Run every webhook check and merge the results."""
        report = ValidationReport("webhooks")
        report.extend(self.validate_configuration(binding))
        report.extend(self.validate_implementation(binding, module_source))
        report.extend(self.validate_component_usage(binding, component_source))
        report.extend(self.check_security(module_source))
        logger.debug("Webhook validation found %d issues", len(report.issues))
        return report
