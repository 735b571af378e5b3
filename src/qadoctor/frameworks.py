# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-framework configuration records produced by detection.

Each adapter owns exactly one config type. Instances are frozen: callers
needing a variant for a single command (a target file, a test path) derive a
copy through :meth:`FrameworkConfig.with_target`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

PackageManager = Literal["npm", "pnpm", "yarn", "bun"]
DotNetTestFramework = Literal["nunit", "xunit", "mstest", "unknown"]


class FrameworkConfig(BaseModel):
    """Fields shared by every framework configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")

    project_root: str
    framework: str

    def merged(self, overrides: Mapping[str, Any]) -> Self:
        """Return a validated copy with ``overrides`` applied over this config."""

        return self.model_validate({**self.model_dump(), **dict(overrides)})

    def with_target(self, **updates: Any) -> Self:
        """Return a copy extended with single-command fields such as ``file``."""

        return self.merged(updates)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase mapping embedded in detection results."""

        return self.model_dump(mode="json", by_alias=True)


class BuildConfig(FrameworkConfig):
    """Base for configurations driving a build pipeline."""

    build_type: str


class SuiteConfig(FrameworkConfig):
    """Base for configurations driving a test runner."""

    test_type: str
    test_path: str | None = None
    test_file: str | None = None


class TypeScriptConfig(BuildConfig):
    """Settings for TypeScript/JavaScript builds."""

    framework: str = "typescript"
    build_type: str = "typescript"
    package_manager: PackageManager = "npm"
    build_script: str = "build"
    package_json: str | None = None
    file: str | None = None


class DotNetConfig(BuildConfig):
    """Settings for .NET solution or project builds."""

    framework: str = "dotnet"
    build_type: str = "dotnet"
    solution_file: str | None = None
    project_file: str | None = None
    project_count: int = 0
    use_dotnet_format: bool = False
    build_path: str | None = None
    file: str | None = None


class VitestConfig(SuiteConfig):
    """Settings for Vitest or Jest unit test suites."""

    framework: str = "vitest"
    test_type: str = "unit"
    vitest_config: str | None = None
    package_manager: PackageManager = "pnpm"
    has_prettier: bool = False


class PlaywrightConfig(SuiteConfig):
    """Settings for Playwright end-to-end suites."""

    framework: str = "playwright"
    test_type: str = "e2e"
    playwright_config: str | None = None
    package_manager: PackageManager = "npm"
    has_prettier: bool = False


class DotNetTestConfig(SuiteConfig):
    """Settings for NUnit, xUnit or MSTest projects run through ``dotnet test``."""

    framework: str = "dotnet-test"
    test_type: str = "unit"
    test_project: str | None = None
    test_framework: DotNetTestFramework = "unknown"


__all__ = [
    "BuildConfig",
    "DotNetConfig",
    "DotNetTestConfig",
    "DotNetTestFramework",
    "FrameworkConfig",
    "PackageManager",
    "PlaywrightConfig",
    "SuiteConfig",
    "TypeScriptConfig",
    "VitestConfig",
]
