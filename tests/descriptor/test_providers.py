"""Tests for provider, interface and webhook-binding extraction."""

from __future__ import annotations

from modbuild.descriptor.providers import ProviderExtractor, interface_tokens, provider_token, webhook_binding


class TestProviderToken:
    def test_enum_member_is_lowercased(self) -> None:
        assert provider_token("provider: Provider.GITHUB") == "github"

    def test_string_literal(self) -> None:
        assert provider_token("provider: 'slack'") == "slack"

    def test_absent(self) -> None:
        assert provider_token("name: 'x'") is None


class TestProviderExtractor:
    def test_parses_objects(self) -> None:
        content = """
            { provider: Provider.GITHUB, scopes: ['repo', 'repo'], description: 'Code host' },
            { provider: 'slack', required: false },
            { description: 'no provider' },
        """
        providers = ProviderExtractor().extract(content)
        assert [p.name for p in providers] == ["github", "slack"]
        assert providers[0].required is True
        assert providers[0].scopes == ("repo",)
        assert providers[0].description == "Code host"
        assert providers[1].required is False

    def test_to_dict_omits_empty(self) -> None:
        (provider,) = ProviderExtractor().extract("{ provider: 'stripe' }")
        assert provider.to_dict() == {"name": "stripe", "required": True}


class TestInterfaceTokens:
    def test_enum_tokens(self) -> None:
        assert interface_tokens("ModuleInterfaces.ISearchable, ModuleInterfaces.IRefreshable") == (
            "ISearchable",
            "IRefreshable",
        )

    def test_string_fallback_and_dedup(self) -> None:
        assert interface_tokens("'ISearchable', 'ISearchable', 'IExportable'") == ("ISearchable", "IExportable")

    def test_empty(self) -> None:
        assert interface_tokens("") == ()


class TestWebhookBinding:
    def test_full_binding(self) -> None:
        options = """
            id: 1,
            webhooks: {
                provider: Provider.GITHUB,
                events: ['issues', 'pull_request'],
                configFields: ['owner', 'repo'],
            },
        """
        binding = webhook_binding(options)
        assert binding is not None
        assert binding.provider == "github"
        assert binding.events == ("issues", "pull_request")
        assert binding.config_fields == ("owner", "repo")
        assert binding.to_dict() == {
            "provider": "github",
            "events": ["issues", "pull_request"],
            "configFields": ["owner", "repo"],
        }

    def test_missing_section(self) -> None:
        assert webhook_binding("id: 1, name: 'x'") is None

    def test_empty_section(self) -> None:
        assert webhook_binding("webhooks: {}") is None
