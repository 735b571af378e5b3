# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Playwright end-to-end test adapter.

Browser workers are memory hungry and may share server-side state, so the
strategy caps workers at four, staggers spawns and asks for isolation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from ..context import DetectionContext
from ..frameworks import PlaywrightConfig
from ..models import ParallelStrategy, ValidationCommand
from ..parsers import javascript, testing
from ..parsers.base import LineRule
from .base import SuiteAdapter
from .node import BUILD_LOCKFILES, config_candidates, detect_package_manager, existing_on_disk, first_existing

CONFIG_CANDIDATES: Final[tuple[str, ...]] = config_candidates("playwright.config", "e2e/playwright.config")
ISOLATION_NOTE: Final[str] = (
    "E2E tests may share state. Use unique test data (UUIDs, timestamps) to avoid conflicts. "
    "Playwright provides browser context isolation automatically."
)
_DEFAULT_TARGETS: Final[str] = "e2e tests"
_VALIDATION_RULES: Final[dict[str, Sequence[LineRule]]] = {
    "eslint": javascript.ESLINT_RULES,
    "tsc": javascript.TSC_RULES,
}


class PlaywrightAdapter(SuiteAdapter[PlaywrightConfig]):
    """End-to-end adapter for ``@playwright/test`` suites."""

    name = "playwright"
    display_name = "Playwright"
    config_type = PlaywrightConfig

    def can_detect(self, context: DetectionContext) -> bool:
        manifest = context.package_json
        if manifest and '"@playwright/test"' in manifest:
            return True
        return first_existing(context, CONFIG_CANDIDATES) is not None

    def detect_config(self, context: DetectionContext) -> Mapping[str, Any]:
        manifest = context.package_json or ""
        return {
            "playwright_config": first_existing(context, CONFIG_CANDIDATES),
            "package_manager": detect_package_manager(context, BUILD_LOCKFILES, "npm"),
            "has_prettier": '"prettier"' in manifest,
        }

    def _config_file(self, config: PlaywrightConfig) -> str | None:
        return config.playwright_config or existing_on_disk(config.project_root, CONFIG_CANDIDATES)

    def get_test_command(self, config: PlaywrightConfig) -> str:
        # Playwright is always launched through npx regardless of package manager.
        parts = ["npx playwright test"]
        config_file = self._config_file(config)
        if config_file:
            parts.append(f"--config {config_file}")
        if config.test_path:
            parts.append(config.test_path)
        parts.append("--reporter=list")
        return " ".join(parts)

    def get_validation_commands(self, config: PlaywrightConfig) -> list[ValidationCommand]:
        pm = config.package_manager
        target = config.test_path or _DEFAULT_TARGETS
        commands: list[ValidationCommand] = []
        if config.has_prettier:
            commands.append(ValidationCommand(name="prettier", command=f"{pm} exec prettier --write {target}", optional=True))
        commands.append(ValidationCommand(name="eslint", command=f"{pm} exec eslint --max-warnings 0 {target}"))
        tsc_args = f"--noEmit {config.test_path}" if config.test_path else "--noEmit"
        commands.append(ValidationCommand(name="tsc", command=f"{pm} exec tsc {tsc_args}"))
        return commands

    def get_verify_command(self, config: PlaywrightConfig) -> str:
        target = config.test_file or config.test_path
        if not target:
            raise ValueError("Playwright verification requires a test file")
        parts = [f"npx playwright test {target}"]
        if config.playwright_config:
            parts.append(f"--config {config.playwright_config}")
        parts.append("--workers=1")
        return " ".join(parts)

    def test_rules(self) -> Sequence[LineRule]:
        return testing.PLAYWRIGHT_RULES

    def validation_rules(self, validator_name: str) -> Sequence[LineRule]:
        return _VALIDATION_RULES.get(validator_name, ())

    def get_resource_multiplier(self) -> float:
        return 2.5

    def get_parallel_execution_strategy(self, cpu_cores: int) -> ParallelStrategy:
        return ParallelStrategy(
            max_workers=min(4, cpu_cores // 2),
            stagger_delay_ms=5000,
            requires_isolation=True,
            isolation_note=ISOLATION_NOTE,
        )

    def get_test_file_patterns(self) -> list[str]:
        return [
            "**/*.spec.ts",
            "**/*.spec.js",
            "e2e/**/*.test.ts",
            "e2e/**/*.test.js",
            "tests/**/*.spec.ts",
            "tests/**/*.spec.js",
        ]

    def get_skip_patterns(self) -> list[str]:
        return [r"test\.skip\(", r"test\.fixme\("]

    def get_focus_patterns(self) -> list[str]:
        return [r"test\.only\("]


__all__ = ["CONFIG_CANDIDATES", "ISOLATION_NOTE", "PlaywrightAdapter"]
