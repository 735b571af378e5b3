# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
""".NET solution and project build adapter."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path, PureWindowsPath
from typing import Any, Final

from ..context import DetectionContext
from ..errors import BuildTargetNotFoundError
from ..frameworks import DotNetConfig
from ..models import ParallelStrategy, ValidationCommand
from ..parsers import dotnet
from ..parsers.base import LineRule
from ..severity import DEFAULT_DOTNET_EXCLUSIONS
from .base import BuildAdapter

LOGGER = logging.getLogger(__name__)

TARGET_SUFFIXES: Final[tuple[str, ...]] = (".sln", ".slnx", ".csproj")
WORKFLOW_GLOBS: Final[tuple[str, ...]] = (".github/workflows/**/*.yml", ".github/workflows/**/*.yaml")
FORMAT_MARKERS: Final[tuple[str, ...]] = ("dotnet format", "dotnet-format")
_MISSING_TARGET: Final[str] = "No .NET solution or project found"


def _pick_target(names: Iterable[str]) -> str | None:
    ordered = sorted(names)
    for suffix in TARGET_SUFFIXES:
        for name in ordered:
            if name.endswith(suffix):
                return name
    return None


def find_build_target(project_root: Path) -> Path | None:
    """Search ``project_root`` and its immediate subdirectories for a build target.

    Within one directory a solution beats a project file; the root beats any
    subdirectory. Unreadable directories are skipped.
    """

    try:
        entries = sorted(project_root.iterdir())
    except OSError as exc:
        LOGGER.debug("cannot list %s: %s", project_root, exc)
        return None
    picked = _pick_target(entry.name for entry in entries if entry.is_file())
    if picked is not None:
        return project_root / picked
    for entry in entries:
        if not entry.is_dir():
            continue
        try:
            children = [child.name for child in entry.iterdir() if child.is_file()]
        except OSError as exc:
            LOGGER.debug("cannot list %s: %s", entry, exc)
            continue
        picked = _pick_target(children)
        if picked is not None:
            return entry / picked
    return None


def uses_dotnet_format(context: DetectionContext) -> bool:
    """Return ``True`` when a GitHub workflow invokes ``dotnet format``."""

    for pattern in WORKFLOW_GLOBS:
        for workflow in context.glob(pattern):
            content = context.try_read(workflow)
            if content and any(marker in content for marker in FORMAT_MARKERS):
                return True
    return False


class DotNetAdapter(BuildAdapter[DotNetConfig]):
    """Build adapter for ``*.sln``, ``*.slnx`` and ``*.csproj`` projects.

    A single ``.cs`` file cannot be compiled in isolation, so verification is
    always deferred to the final Debug and Release build.
    """

    name = "dotnet"
    display_name = ".NET Build"
    config_type = DotNetConfig

    def __init__(self, excluded_warnings: Iterable[str] = DEFAULT_DOTNET_EXCLUSIONS) -> None:
        super().__init__(excluded_warnings)

    def can_detect(self, context: DetectionContext) -> bool:
        return any(context.glob(f"**/*{suffix}") for suffix in TARGET_SUFFIXES)

    def detect_config(self, context: DetectionContext) -> Mapping[str, Any]:
        solutions = context.glob("**/*.sln") or context.glob("**/*.slnx")
        solution_file = solutions[0] if solutions else None
        project_file = None
        project_count = 0
        if solution_file is None:
            projects = context.glob("**/*.csproj")
            project_file = projects[0] if projects else None
            project_count = len(projects)
        return {
            "solution_file": solution_file,
            "project_file": project_file,
            "project_count": project_count,
            "use_dotnet_format": uses_dotnet_format(context),
        }

    def get_display_name(self, config: DotNetConfig) -> str:
        target = config.solution_file or config.project_file
        if target:
            return f"{PureWindowsPath(target).name} (dotnet)"
        return self.display_name

    def resolve_target(self, config: DotNetConfig, *, include_build_path: bool = True) -> str | None:
        """Return the solution or project to build, in precedence order."""

        explicit = config.solution_file or config.project_file
        if explicit is None and include_build_path:
            explicit = config.build_path
        if explicit:
            return explicit
        found = find_build_target(Path(config.project_root))
        return str(found) if found is not None else None

    def _require_target(self, config: DotNetConfig) -> str:
        target = self.resolve_target(config)
        if target is None:
            raise BuildTargetNotFoundError(self.name, _MISSING_TARGET)
        return target

    def get_build_command(self, config: DotNetConfig) -> list[str]:
        # Debug surfaces most warnings; Release is checked in the final pass.
        target = self._require_target(config)
        return [
            f'dotnet restore "{target}"',
            f'dotnet build "{target}" --no-restore --configuration Debug',
        ]

    def get_final_build_command(self, config: DotNetConfig) -> list[str]:
        target = self._require_target(config)
        return [
            f'dotnet restore "{target}"',
            f'dotnet build "{target}" --no-restore --configuration Debug',
            f'dotnet build "{target}" --no-restore --configuration Release',
        ]

    def get_validation_commands(self, config: DotNetConfig) -> list[ValidationCommand]:
        target = self.resolve_target(config, include_build_path=False)
        if target is None or not config.use_dotnet_format:
            return []
        return [ValidationCommand(name="dotnet-format", command=f'dotnet format "{target}" --verify-no-changes')]

    def get_verify_command(self, config: DotNetConfig) -> None:
        return None

    def build_rules(self) -> Sequence[LineRule]:
        return dotnet.BUILD_RULES

    def validation_rules(self, validator_name: str) -> Sequence[LineRule]:
        return dotnet.FORMAT_RULES if validator_name == "dotnet-format" else ()

    def get_resource_multiplier(self) -> float:
        return 2.0

    def get_parallel_execution_strategy(self, cpu_cores: int) -> ParallelStrategy:
        # Stagger spawns to avoid obj/ file lock contention.
        return ParallelStrategy(max_workers=max(1, cpu_cores // 2), stagger_delay_ms=2000)

    def get_source_file_patterns(self) -> list[str]:
        return ["**/*.cs", "**/*.csproj", "**/*.sln"]


__all__ = [
    "DEFAULT_DOTNET_EXCLUSIONS",
    "DotNetAdapter",
    "find_build_target",
    "uses_dotnet_format",
]
