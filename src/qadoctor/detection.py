# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project discovery across a directory tree."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from .adapters.base import FrameworkAdapter
from .context import DetectionContext
from .frameworks import BuildConfig, SuiteConfig
from .models import DetectionResult
from .process import find_git_root

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH: Final[int] = 2
SKIPPED_DIR_NAMES: Final[frozenset[str]] = frozenset({"node_modules"})
SOLUTION_GLOBS: Final[tuple[str, ...]] = ("**/*.sln", "**/*.slnx")
_DOTNET_BUILD: Final[str] = "dotnet"


@dataclass(slots=True)
class DetectedProject:
    """Adapter match for one directory."""

    project_root: Path
    adapter: FrameworkAdapter[Any]
    context: DetectionContext

    @property
    def has_solution(self) -> bool:
        return any(self.context.glob(pattern) for pattern in SOLUTION_GLOBS)


def _child_dirs(directory: Path) -> list[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        LOGGER.debug("skipping unreadable directory %s: %s", directory, exc)
        return []
    return [
        entry
        for entry in entries
        if entry.is_dir() and not entry.name.startswith(".") and entry.name not in SKIPPED_DIR_NAMES
    ]


def iter_search_dirs(start: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[Path]:
    """Yield ``start`` then its subdirectories breadth first, down to ``max_depth``."""

    yield start
    level = [start]
    for _depth in range(max_depth):
        level = [child for directory in level for child in _child_dirs(directory)]
        yield from level


def _match(directory: Path, adapters: Sequence[FrameworkAdapter[Any]]) -> list[DetectedProject]:
    context = DetectionContext.for_root(directory)
    return [
        DetectedProject(project_root=directory, adapter=adapter, context=context)
        for adapter in adapters
        if adapter.can_detect(context)
    ]


def _is_descendant(child: Path, parent: Path) -> bool:
    return child != parent and child.is_relative_to(parent)


def drop_nested_dotnet_projects(detected: list[DetectedProject]) -> list[DetectedProject]:
    """Drop solution-less .NET matches that sit inside a .NET match with a solution."""

    with_solution = [item for item in detected if item.adapter.name == _DOTNET_BUILD and item.has_solution]
    if not with_solution:
        return detected
    kept: list[DetectedProject] = []
    for item in detected:
        if item.adapter.name == _DOTNET_BUILD and not item.has_solution:
            if any(_is_descendant(item.project_root, owner.project_root) for owner in with_solution):
                continue
        kept.append(item)
    return kept


def detect_projects(
    start: Path,
    *,
    adapters: Sequence[FrameworkAdapter[Any]],
    walk_up: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[DetectedProject]:
    """Return every adapter match under ``start``.

    ``start`` and its subdirectories down to ``max_depth`` are checked with
    every adapter in priority order. Walking up is opt-in and only happens
    when nothing below ``start`` matched; it stops at the first ancestor
    with any match.

    Returns:
        list[DetectedProject]: Matches in directory then adapter order. Empty
        when nothing was recognised.
    """

    root = start.resolve()
    detected: list[DetectedProject] = []
    if root.is_dir():
        for directory in iter_search_dirs(root, max_depth):
            detected.extend(_match(directory, adapters))
    if detected or not walk_up:
        return drop_nested_dotnet_projects(detected)

    for ancestor in root.parents:
        if ancestor == Path(ancestor.anchor):
            break
        found = _match(ancestor, adapters)
        if found:
            LOGGER.debug("detected %d project(s) at ancestor %s", len(found), ancestor)
            return drop_nested_dotnet_projects(found)
    return []


def describe(detected: Sequence[DetectedProject]) -> list[DetectionResult]:
    """Return the JSON records for ``detected`` in order."""

    results: list[DetectionResult] = []
    for item in detected:
        config = item.adapter.resolve_config(item.context)
        results.append(
            DetectionResult(
                framework=item.adapter.name,
                display_name=item.adapter.get_display_name(config),
                build_type=config.build_type if isinstance(config, BuildConfig) else None,
                test_type=config.test_type if isinstance(config, SuiteConfig) else None,
                project_root=str(item.project_root),
                config=config.to_payload(),
            )
        )
    return results


def default_start(cwd: Path | None = None) -> Path:
    """Return the git toplevel containing ``cwd``, else ``cwd`` itself."""

    here = (cwd or Path.cwd()).resolve()
    return find_git_root(here) or here


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DetectedProject",
    "default_start",
    "describe",
    "detect_projects",
    "drop_nested_dotnet_projects",
    "find_git_root",
    "iter_search_dirs",
]
