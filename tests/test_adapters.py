# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for framework detection, command synthesis and resource hints."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from qadoctor.adapters import (
    DotNetAdapter,
    DotNetTestAdapter,
    PlaywrightAdapter,
    TypeScriptAdapter,
    VitestAdapter,
    adapter_by_name,
    adapters_for,
    build_adapters,
    test_adapters,
)
from qadoctor.adapters.dotnet import find_build_target
from qadoctor.adapters.dotnet_test import filter_class_name
from qadoctor.config import DoctorConfig
from qadoctor.context import DetectionContext
from qadoctor.errors import BuildTargetNotFoundError

PROJECT = "/work/app"


def _manifest(**sections: Mapping[str, str]) -> str:
    return json.dumps(sections)


def _context(files: Mapping[str, str]) -> DetectionContext:
    return DetectionContext.from_files(PROJECT, files)


def test_typescript_detection_fingerprints() -> None:
    adapter = TypeScriptAdapter()

    assert adapter.can_detect(_context({"tsconfig.json": "{}"}))
    assert adapter.can_detect(_context({"package.json": _manifest(devDependencies={"typescript": "^5"})}))
    assert not adapter.can_detect(_context({"package.json": _manifest(dependencies={"react": "^18"})}))
    assert not adapter.can_detect(_context({}))


def test_typescript_config_prefers_lockfile_and_build_script() -> None:
    manifest = _manifest(scripts={"compile": "tsc -p ."}, devDependencies={"typescript": "^5"})
    adapter = TypeScriptAdapter()

    config = adapter.resolve_config(_context({"package.json": manifest, "pnpm-lock.yaml": "", "yarn.lock": ""}))

    assert config.package_manager == "pnpm"
    assert config.build_script == "compile"
    assert config.project_root == PROJECT
    assert adapter.get_build_command(config) == ["pnpm run compile"]


def test_typescript_defaults_when_manifest_missing() -> None:
    adapter = TypeScriptAdapter()

    config = adapter.resolve_config(_context({"tsconfig.json": "{}"}))

    assert config.package_manager == "npm"
    assert config.build_script == "build"
    assert [command.name for command in adapter.get_validation_commands(config)] == ["tsc"]


def test_typescript_validation_commands_follow_declared_tools() -> None:
    manifest = _manifest(devDependencies={"typescript": "^5", "eslint": "^9", "prettier": "^3"})
    adapter = TypeScriptAdapter()
    config = adapter.resolve_config(_context({"package.json": manifest}))

    commands = adapter.get_validation_commands(config)

    assert [(command.name, command.optional) for command in commands] == [
        ("prettier", True),
        ("eslint", False),
        ("tsc", False),
    ]
    assert commands[1].command == "npm exec eslint . --max-warnings=0"


def test_typescript_verify_command_needs_target() -> None:
    adapter = TypeScriptAdapter()
    config = adapter.resolve_config(_context({"tsconfig.json": "{}"}))

    with pytest.raises(ValueError):
        adapter.get_verify_command(config)
    assert adapter.get_verify_command(config.with_target(file="src/a.ts")) == 'npm exec tsc --noEmit "src/a.ts"'


def test_config_variants_are_copies() -> None:
    adapter = TypeScriptAdapter()
    config = adapter.resolve_config(_context({"tsconfig.json": "{}"}))

    narrowed = config.with_target(file="src/a.ts")

    assert config.file is None
    assert narrowed.file == "src/a.ts"
    assert narrowed.to_payload()["projectRoot"] == PROJECT


def test_dotnet_detects_solution_first() -> None:
    adapter = DotNetAdapter()
    context = _context({"src/App/App.csproj": "<Project/>", "App.sln": ""})

    assert adapter.can_detect(context)
    config = adapter.resolve_config(context)

    assert config.solution_file == "App.sln"
    assert config.project_file is None
    assert adapter.get_display_name(config) == "App.sln (dotnet)"
    assert adapter.get_build_command(config) == [
        'dotnet restore "App.sln"',
        'dotnet build "App.sln" --no-restore --configuration Debug',
    ]
    assert adapter.get_final_build_command(config)[-1] == 'dotnet build "App.sln" --no-restore --configuration Release'


def test_dotnet_counts_projects_without_solution() -> None:
    config = DotNetAdapter().resolve_config(_context({"b/B.csproj": "", "a/A.csproj": ""}))

    assert config.project_file == "a/A.csproj"
    assert config.project_count == 2


def test_dotnet_missing_target_is_a_configuration_error(tmp_path: Path) -> None:
    adapter = DotNetAdapter()
    config = adapter.resolve_config(DetectionContext.for_root(tmp_path))

    with pytest.raises(BuildTargetNotFoundError) as excinfo:
        adapter.get_build_command(config)
    assert excinfo.value.framework == "dotnet"


def test_dotnet_build_path_fallback() -> None:
    adapter = DotNetAdapter()
    config = adapter.resolve_config(_context({})).with_target(build_path="legacy/Old.csproj")

    assert adapter.get_build_command(config)[0] == 'dotnet restore "legacy/Old.csproj"'
    assert adapter.get_validation_commands(config) == []


def test_find_build_target_prefers_root_solution(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "Sub.csproj").write_text("", encoding="utf-8")

    assert find_build_target(tmp_path) == tmp_path / "sub" / "Sub.csproj"

    (tmp_path / "Root.slnx").write_text("", encoding="utf-8")
    (tmp_path / "Root.csproj").write_text("", encoding="utf-8")
    assert find_build_target(tmp_path) == tmp_path / "Root.slnx"


def test_dotnet_format_gate_comes_from_workflows() -> None:
    adapter = DotNetAdapter()
    files = {"App.sln": "", ".github/workflows/ci.yml": "run: dotnet format --verify-no-changes"}

    config = adapter.resolve_config(_context(files))

    assert config.use_dotnet_format
    commands = adapter.get_validation_commands(config)
    assert [command.command for command in commands] == ['dotnet format "App.sln" --verify-no-changes']


def test_dotnet_verification_is_deferred() -> None:
    adapter = DotNetAdapter()
    config = adapter.resolve_config(_context({"App.sln": ""}))

    assert adapter.get_verify_command(config.with_target(file="src/Program.cs")) is None


def test_vitest_detection_and_commands() -> None:
    adapter = VitestAdapter()
    manifest = _manifest(devDependencies={"vitest": "^1", "prettier": "^3"})
    context = _context({"package.json": manifest, "package-lock.json": "{}", "vitest.config.ts": ""})

    assert adapter.can_detect(context)
    config = adapter.resolve_config(context)

    assert config.package_manager == "npm"
    assert config.has_prettier
    assert config.test_type == "unit"
    assert adapter.get_test_command(config) == "npm exec vitest run --config vitest.config.ts"
    assert adapter.get_test_command(config.with_target(test_path="src")) == (
        "npm exec vitest run --config vitest.config.ts src"
    )
    assert [command.name for command in adapter.get_validation_commands(config)] == ["prettier", "eslint", "tsc"]
    assert adapter.get_verify_command(config.with_target(test_file="src/a.test.ts")) == (
        "npm exec vitest src/a.test.ts --run"
    )


def test_vitest_ignores_packages_without_runner() -> None:
    assert not VitestAdapter().can_detect(_context({"package.json": _manifest(dependencies={"react": "^18"})}))
    assert not VitestAdapter().can_detect(_context({"vitest.config.ts": ""}))


def test_playwright_commands_use_list_reporter() -> None:
    adapter = PlaywrightAdapter()
    context = _context({"package.json": _manifest(devDependencies={"@playwright/test": "^1"})})

    config = adapter.resolve_config(context)

    assert config.test_type == "e2e"
    assert adapter.get_test_command(config) == "npx playwright test --reporter=list"
    assert adapter.get_verify_command(config.with_target(test_file="e2e/login.spec.ts")) == (
        "npx playwright test e2e/login.spec.ts --workers=1"
    )


def test_playwright_strategy_caps_workers() -> None:
    strategy = PlaywrightAdapter().get_parallel_execution_strategy(16)

    assert strategy.max_workers == 4
    assert strategy.requires_isolation
    assert strategy.stagger_delay_ms == 5000
    assert PlaywrightAdapter().get_parallel_execution_strategy(4).max_workers == 2


def test_dotnet_test_project_detection() -> None:
    csproj = '<PackageReference Include="Microsoft.NET.Test.Sdk" /><PackageReference Include="NUnit3TestAdapter" />'
    context = _context({"src/App/App.csproj": "<Project/>", "tests/App.Tests/App.Tests.csproj": csproj})
    adapter = DotNetTestAdapter()

    assert adapter.can_detect(context)
    config = adapter.resolve_config(context)

    assert config.test_project == "tests/App.Tests/App.Tests.csproj"
    assert config.test_framework == "nunit"
    assert adapter.get_test_command(config) == (
        'dotnet test "tests/App.Tests/App.Tests.csproj" --no-build --verbosity normal'
    )
    narrowed = config.with_target(test_path="tests/App.Tests/CalculatorTests.cs")
    assert adapter.get_test_command(narrowed).endswith('--filter "FullyQualifiedName~CalculatorTests"')


def test_dotnet_test_requires_a_test_sdk() -> None:
    assert not DotNetTestAdapter().can_detect(_context({"src/App/App.csproj": "<Project/>"}))


def test_filter_class_name_handles_both_separators() -> None:
    assert filter_class_name("tests\\Unit\\FooTests.cs") == "FooTests"
    assert filter_class_name("tests/Unit/BarTests.cs") == "BarTests"


@pytest.mark.parametrize(
    ("factory", "multiplier"),
    [
        (TypeScriptAdapter, 1.5),
        (DotNetAdapter, 2.0),
        (VitestAdapter, 1.0),
        (PlaywrightAdapter, 2.5),
        (DotNetTestAdapter, 1.5),
    ],
)
def test_resource_multipliers(factory: Callable[[], object], multiplier: float) -> None:
    assert factory().get_resource_multiplier() == multiplier  # type: ignore[attr-defined]


def test_registries_are_ordered_and_closed() -> None:
    assert [adapter.name for adapter in build_adapters()] == ["typescript", "dotnet"]
    assert [adapter.name for adapter in test_adapters()] == ["vitest", "playwright", "dotnet-test"]
    assert [adapter.name for adapter in adapters_for("test")] == ["vitest", "playwright", "dotnet-test"]
    assert [adapter.name for adapter in adapters_for("build")] == ["typescript", "dotnet"]
    assert adapter_by_name("playwright").name == "playwright"
    with pytest.raises(KeyError):
        adapter_by_name("gradle")


def test_registries_apply_configured_exclusions() -> None:
    config = DoctorConfig()
    config.exclusions.typescript_excluded_warnings = ["TS6133"]
    config.exclusions.dotnet_excluded_warnings = ["CS0618"]

    typescript, dotnet = build_adapters(config)

    assert typescript.excluded_warnings == frozenset({"TS6133"})
    assert dotnet.excluded_warnings == frozenset({"CS0618"})
    assert DotNetAdapter().excluded_warnings == frozenset({"NU1902", "DX1000"})


def test_build_adapters_publish_source_globs() -> None:
    assert TypeScriptAdapter().get_source_file_patterns() == ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx"]
    assert DotNetAdapter().get_source_file_patterns() == ["**/*.cs", "**/*.csproj", "**/*.sln"]
    assert VitestAdapter().get_source_file_patterns() == []


@pytest.mark.parametrize(
    ("factory", "focused", "plain"),
    [
        (VitestAdapter, ["it.only('adds', () => {})", "describe.only('calc', () => {})", "fit('x')"], "it('adds')"),
        (PlaywrightAdapter, ["test.only('logs in', async () => {})"], "test('logs in', async () => {})"),
        (DotNetTestAdapter, ["[Test] [Explicit]"], "[Test]"),
    ],
)
def test_focus_patterns_match_focused_tests_only(
    factory: Callable[[], object], focused: list[str], plain: str
) -> None:
    patterns = [re.compile(pattern) for pattern in factory().get_focus_patterns()]

    for line in focused:
        assert any(pattern.search(line) for pattern in patterns), line
    assert not any(pattern.search(plain) for pattern in patterns)


def test_build_adapters_have_no_focus_patterns() -> None:
    assert TypeScriptAdapter().get_focus_patterns() == []
    assert DotNetAdapter().get_focus_patterns() == []


def test_dotnet_default_exclusions_match_configuration_default() -> None:
    configured = DoctorConfig().exclusions.dotnet_excluded_warnings

    assert sorted(DotNetAdapter().excluded_warnings) == sorted(configured) == ["DX1000", "NU1902"]
    assert sorted(DotNetTestAdapter().excluded_warnings) == sorted(configured)
