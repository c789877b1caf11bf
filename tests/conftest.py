"""Shared fixtures: TypeScript module sources and fake toolchain collaborators."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest

from modbuild.config import BuildOptions
from modbuild.errors import CompilationError
from modbuild.packaging.bundle import BundlePackager
from modbuild.pipeline.orchestrator import BuildPipeline
from modbuild.toolchain.compiler import CompileRequest, CompileResult
from modbuild.toolchain.runner import ToolResult


# === Module sources ===

MINIMAL_MODULE = """\
import { BaseModule, ModuleContext } from 'dashspace-lib';
import Component from './Component';

export class MinimalModule extends BaseModule {}

export default function MinimalModuleFactory(context: ModuleContext) {
  const module = new MinimalModule(context, {
    id: 1,
    name: 'X',
    version: '1.0.0',
  });
  return { module, Component };
}
"""

FULL_MODULE = """\
import {
  BaseModule,
  ConfigurationStep,
  TextField,
  NumberField,
  SelectField,
  BooleanField,
  ModuleContext,
  ModuleInterfaces,
  Provider,
  WebhookEvent,
} from 'dashspace-lib';
import Component from './Component';

const configurationSteps = [
  new ConfigurationStep({
    id: 'connection',
    title: 'Connection',
    description: 'Connect your account',
    order: 1,
    fields: [
      new TextField({
        name: 'owner',
        label: 'Owner',
        description: 'Repository owner',
        validation: { required: true, pattern: '^[a-z0-9-]+$' },
      }),
      new TextField({ name: 'repo', label: 'Repository' }),
    ],
  }),
  new ConfigurationStep({
    id: 'display',
    title: 'Display',
    order: 2,
    optional: true,
    fields: [
      new NumberField({ name: 'limit', label: 'Limit', defaultValue: 10, min: 1, max: 100 }),
      new SelectField({
        name: 'state',
        label: 'State',
        options: [
          { value: 'open', label: 'Open' },
          { value: 'closed', label: 'Closed' },
        ],
      }),
      new BooleanField({ name: 'showClosed', label: 'Show closed', defaultValue: 'false' }),
    ],
  }),
];

const providers = [
  {
    provider: Provider.GITHUB,
    required: true,
    scopes: ['repo', 'read:user'],
    description: 'GitHub account',
  },
];

export class GithubIssuesModule extends BaseModule {
  constructor(context: ModuleContext, options: any, steps: any, reqs: any, interfaces: any) {
    super(context, options, steps, reqs, interfaces);
    this.registerWebhookHandler('issues', this.handleIssuesEvent.bind(this));
    this.registerWebhookHandler('pull_request', this.handlePullRequestEvent.bind(this));
  }

  handleIssuesEvent(event: WebhookEvent) {
    try {
      if (!event.data) return;
      this.emit('issues', event.data);
    } catch (error) {
      this.emit('error', error);
    }
  }

  handlePullRequestEvent(event: WebhookEvent) {
    try {
      this.emit('pull_request', event.data);
    } catch (error) {
      this.emit('error', error);
    }
  }

  getPermissions(): string[] {
    return ['storage:read', 'network:external'];
  }
}

export default function GithubIssuesModuleFactory(context: ModuleContext) {
  const module = new GithubIssuesModule(
    context,
    {
      id: 42,
      name: 'GitHub Issues',
      version: '2.1.0',
      description: 'Track repository issues',
      author: 'Dash Team',
      icon: 'github',
      category: 'development',
      tags: ['github', 'issues', 'github'],
      webhooks: {
        provider: Provider.GITHUB,
        events: ['issues', 'pull_request'],
        configFields: ['owner', 'repo'],
      },
    },
    configurationSteps,
    providers,
    [ModuleInterfaces.ISearchable, ModuleInterfaces.IRefreshable],
  );
  return { module, Component };
}
"""

FULL_COMPONENT = """\
import React, { useState } from 'react';
import { useModuleInterfaces, useDataProvider, useWebhookEvents, InterfaceHandlers } from 'dashspace-lib';

export default function Component({ module }: any) {
  const [loading, setLoading] = useState(false);
  const [error, setError] = useState(null);
  const items: Issue[] = [];

  useWebhookEvents(module, ['issues', 'pull_request']);

  useDataProvider(
    'issues',
    {
      items,
      schema: {
        fields: [
          { name: 'title', type: 'string', description: 'Issue title' },
          { name: 'createdAt', type: 'date', nullable: true, example: '2024-01-01' },
        ],
        capabilities: [
          { name: 'filterable', fields: ['title'] },
          { name: 'sortable', fields: ['createdAt'] },
        ],
      },
      computed: {
        openCount: items.length,
        closedCount: 0,
      },
    },
    { type: 'issue-tracker' },
  );

  const handlers = {
    ISearchable: {
      search: async (query: string) => items,
      getSearchResults: () => items,
      getSearchFilters: () => [],
      translateUQLQuery: (q: string) => q,
      getUQLCapabilities: () => [],
    },
    IRefreshable: {
      refresh: async () => setLoading(true),
      getLastRefresh: () => null,
      setAutoRefresh: (enabled: boolean) => undefined,
    },
  } satisfies InterfaceHandlers;

  useModuleInterfaces(module, handlers);
  return null;
}
"""

PLAIN_COMPONENT = """\
export default function Component() {
  const loading = false;
  const error = null;
  return null;
}
"""

PACKAGE_JSON: dict[str, Any] = {
    "name": "github-issues",
    "version": "1.0.0",
    "scripts": {"build": "modbuild build", "test": "jest"},
    "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0", "dashspace-lib": "^1.0.0"},
    "devDependencies": {"@types/react": "^18.2.0", "@types/react-dom": "^18.2.0", "typescript": "^5.0.0"},
}

COMPILED_CODE = "module.exports = { default: function (ctx) { return { Component: function () {} }; } };\n"

FIXED_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


# === Fake collaborators ===


class FakeRunner:
    """Records every command and answers from a per-tool table."""

    def __init__(self, results: dict[str, ToolResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, ...]] = []

    def run(self, args: Sequence[str], cwd: Path) -> ToolResult:
        self.calls.append(tuple(args))
        for key, result in self.results.items():
            if key in args:
                return result
        return ToolResult(args=tuple(args), returncode=0)

    def ran(self, tool: str) -> bool:
        return any(tool in call for call in self.calls)


class FakeCompiler:
    def __init__(self, code: str = COMPILED_CODE, source_map: str | None = None, error: Exception | None = None) -> None:
        self.code = code
        self.source_map = source_map
        self.error = error
        self.requests: list[CompileRequest] = []

    def compile(self, request: CompileRequest) -> CompileResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.code.strip():
            raise CompilationError(message="Compiler produced no output")
        return CompileResult(code=self.code, source_map=self.source_map)


# === Fixtures ===


@pytest.fixture
def minimal_module() -> str:
    return MINIMAL_MODULE


@pytest.fixture
def full_module() -> str:
    return FULL_MODULE


@pytest.fixture
def full_component() -> str:
    return FULL_COMPONENT


@pytest.fixture
def package_json() -> dict[str, Any]:
    return json.loads(json.dumps(PACKAGE_JSON))


@pytest.fixture
def compiled_code() -> str:
    return COMPILED_CODE


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def fixed_packager() -> BundlePackager:
    return BundlePackager(runtime_path=None, clock=lambda: FIXED_TIME)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Write a module project into tmp_path and return its root."""

    def _make(
        module: str = MINIMAL_MODULE,
        component: str | None = PLAIN_COMPONENT,
        package: dict[str, Any] | None = None,
        extra: dict[str, str] | None = None,
        node_modules: bool = True,
    ) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        (root / "Module.tsx").write_text(module, encoding="utf-8")
        if component is not None:
            (root / "Component.tsx").write_text(component, encoding="utf-8")
        (root / "package.json").write_text(json.dumps(package or PACKAGE_JSON), encoding="utf-8")
        if node_modules:
            (root / "node_modules").mkdir(exist_ok=True)
        for name, text in (extra or {}).items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def make_pipeline(
    fake_runner: FakeRunner, fake_compiler: FakeCompiler, fixed_packager: BundlePackager
) -> Callable[..., BuildPipeline]:
    def _make(root: Path, **option_overrides: Any) -> BuildPipeline:
        return BuildPipeline(
            root,
            options=BuildOptions(**option_overrides),
            runner=fake_runner,
            compiler=fake_compiler,
            packager=fixed_packager,
        )

    return _make
