# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""TypeScript and JavaScript build adapter.

Validation runs Prettier (when declared, optional), ESLint with
``--max-warnings=0`` (when declared) and ``tsc --noEmit`` before the
package's build script. Every warning blocks unless its rule code is in the
configured allow-list.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from ..context import DetectionContext
from ..frameworks import TypeScriptConfig
from ..models import ParallelStrategy, ValidationCommand
from ..parsers import javascript
from ..parsers.base import LineRule
from ..process import find_git_root
from .base import BuildAdapter
from .node import BUILD_LOCKFILES, declares_dependency, detect_package_manager, load_package_json

BUILD_SCRIPT_CANDIDATES: Final[tuple[str, ...]] = ("build", "compile", "dist")
PRETTIER_GLOB: Final[str] = "**/*.{ts,tsx,js,jsx}"

_VALIDATION_RULES: Final[dict[str, Sequence[LineRule]]] = {
    "prettier": javascript.PRETTIER_RULES,
    "eslint": javascript.ESLINT_RULES,
    "tsc": javascript.TSC_RULES,
}


class TypeScriptAdapter(BuildAdapter[TypeScriptConfig]):
    """Build adapter for ``tsconfig.json`` or TypeScript-dependent packages."""

    name = "typescript"
    display_name = "TypeScript Build"
    config_type = TypeScriptConfig

    def can_detect(self, context: DetectionContext) -> bool:
        if context.file_exists("tsconfig.json"):
            return True
        manifest = context.package_json
        return bool(manifest) and ('"typescript"' in manifest or "tsconfig.json" in manifest)

    def detect_config(self, context: DetectionContext) -> Mapping[str, Any]:
        manifest = load_package_json(context.package_json)
        scripts = manifest.get("scripts")
        build_script = "build"
        if isinstance(scripts, dict):
            build_script = next((name for name in BUILD_SCRIPT_CANDIDATES if scripts.get(name)), "build")
        return {
            "package_manager": detect_package_manager(context, BUILD_LOCKFILES, "npm"),
            "build_script": build_script,
            "package_json": context.package_json,
        }

    def get_display_name(self, config: TypeScriptConfig) -> str:
        root = Path(config.project_root)
        git_root = find_git_root(root)
        label = root.name
        if git_root is not None and git_root.resolve() != root.resolve():
            try:
                label = root.resolve().relative_to(git_root.resolve()).as_posix()
            except ValueError:
                label = root.name
        return f"{label} (typescript)"

    def get_build_command(self, config: TypeScriptConfig) -> list[str]:
        return [f"{config.package_manager} run {config.build_script or 'build'}"]

    def get_validation_commands(self, config: TypeScriptConfig) -> list[ValidationCommand]:
        manifest = load_package_json(config.package_json)
        pm = config.package_manager
        commands: list[ValidationCommand] = []
        if declares_dependency(manifest, "prettier"):
            commands.append(
                ValidationCommand(name="prettier", command=f'{pm} exec prettier --check "{PRETTIER_GLOB}"', optional=True)
            )
        if declares_dependency(manifest, "eslint"):
            commands.append(ValidationCommand(name="eslint", command=f"{pm} exec eslint . --max-warnings=0"))
        commands.append(ValidationCommand(name="tsc", command=f"{pm} exec tsc --noEmit"))
        return commands

    def get_verify_command(self, config: TypeScriptConfig) -> str:
        if not config.file:
            raise ValueError("TypeScript verification requires a target file")
        return f'{config.package_manager} exec tsc --noEmit "{config.file}"'

    def build_rules(self) -> Sequence[LineRule]:
        return javascript.BUILD_RULES

    def validation_rules(self, validator_name: str) -> Sequence[LineRule]:
        return _VALIDATION_RULES.get(validator_name, ())

    def get_resource_multiplier(self) -> float:
        return 1.5

    def get_parallel_execution_strategy(self, cpu_cores: int) -> ParallelStrategy:
        # Stagger spawns to avoid package-manager lock contention.
        return ParallelStrategy(max_workers=max(1, cpu_cores - 1), stagger_delay_ms=500)

    def get_source_file_patterns(self) -> list[str]:
        return ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx"]


__all__ = ["TypeScriptAdapter"]
