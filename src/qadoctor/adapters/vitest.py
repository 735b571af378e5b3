# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Vitest and Jest unit test adapter."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Final

from ..context import DetectionContext
from ..frameworks import VitestConfig
from ..models import ParallelStrategy, ValidationCommand
from ..parsers import javascript, testing
from ..parsers.base import LineRule
from .base import SuiteAdapter
from .node import TEST_LOCKFILES, config_candidates, detect_package_manager, existing_on_disk, first_existing

CONFIG_CANDIDATES: Final[tuple[str, ...]] = config_candidates("vitest.config", "jest.config")
_RUNNER_DEPENDENCY_RE: Final[re.Pattern[str]] = re.compile(r"[\"'](?:vitest|jest|vite)[\"']")
_VALIDATION_RULES: Final[dict[str, Sequence[LineRule]]] = {
    "eslint": javascript.ESLINT_RULES,
    "tsc": javascript.TSC_RULES,
}


class VitestAdapter(SuiteAdapter[VitestConfig]):
    """Unit test adapter for packages depending on Vitest, Jest or Vite."""

    name = "vitest"
    display_name = "Vitest"
    config_type = VitestConfig

    def can_detect(self, context: DetectionContext) -> bool:
        manifest = context.package_json
        if not manifest:
            return False
        if _RUNNER_DEPENDENCY_RE.search(manifest):
            return True
        return first_existing(context, CONFIG_CANDIDATES) is not None

    def detect_config(self, context: DetectionContext) -> Mapping[str, Any]:
        manifest = context.package_json or ""
        return {
            "vitest_config": first_existing(context, CONFIG_CANDIDATES),
            "package_manager": detect_package_manager(context, TEST_LOCKFILES, "pnpm"),
            "has_prettier": '"prettier"' in manifest,
        }

    def get_test_command(self, config: VitestConfig) -> str:
        parts = [f"{config.package_manager} exec vitest run"]
        config_file = config.vitest_config or existing_on_disk(config.project_root, CONFIG_CANDIDATES)
        if config_file:
            parts.append(f"--config {config_file}")
        if config.test_path:
            parts.append(config.test_path)
        return " ".join(parts)

    def get_validation_commands(self, config: VitestConfig) -> list[ValidationCommand]:
        pm = config.package_manager
        commands: list[ValidationCommand] = []
        if config.has_prettier:
            commands.append(
                ValidationCommand(
                    name="prettier",
                    command=f"{pm} exec prettier --write --experimental-cli {config.test_path or '.'}",
                    optional=True,
                )
            )
        commands.append(
            ValidationCommand(
                name="eslint",
                command=(
                    f"{pm} exec eslint --cache --cache-location .eslintcache --max-warnings 0 "
                    f"{config.test_path or 'src e2e'}"
                ),
            )
        )
        tsc_args = f"--noEmit {config.test_path}" if config.test_path else "--noEmit"
        commands.append(ValidationCommand(name="tsc", command=f"{pm} exec tsc {tsc_args}"))
        return commands

    def get_verify_command(self, config: VitestConfig) -> str:
        target = config.test_file or config.test_path
        if not target:
            raise ValueError("Vitest verification requires a test file")
        return f"{config.package_manager} exec vitest {target} --run"

    def test_rules(self) -> Sequence[LineRule]:
        return testing.VITEST_RULES

    def validation_rules(self, validator_name: str) -> Sequence[LineRule]:
        return _VALIDATION_RULES.get(validator_name, ())

    def get_resource_multiplier(self) -> float:
        return 1.0

    def get_parallel_execution_strategy(self, cpu_cores: int) -> ParallelStrategy:
        return ParallelStrategy(max_workers=max(1, cpu_cores - 1), stagger_delay_ms=0)

    def get_test_file_patterns(self) -> list[str]:
        return [f"**/*.{kind}.{ext}" for kind in ("test", "spec") for ext in ("ts", "tsx", "js", "jsx")]

    def get_skip_patterns(self) -> list[str]:
        return [r"it\.skip\(", r"test\.skip\(", r"describe\.skip\(", r"\bxit\(", r"\bxtest\(", r"\bxdescribe\("]

    def get_focus_patterns(self) -> list[str]:
        return [r"it\.only\(", r"test\.only\(", r"describe\.only\(", r"\bfit\(", r"\bfdescribe\("]


__all__ = ["CONFIG_CANDIDATES", "VitestAdapter"]
