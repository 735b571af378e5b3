# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers shared by the Node.js based adapters."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

from ..context import DetectionContext
from ..frameworks import PackageManager

LOGGER = logging.getLogger(__name__)

# Lockfile precedence for build tooling.
BUILD_LOCKFILES: Final[tuple[tuple[str, PackageManager], ...]] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
)
# Test tooling also honours npm's lockfile ahead of bun.
TEST_LOCKFILES: Final[tuple[tuple[str, PackageManager], ...]] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("bun.lockb", "bun"),
)
JS_CONFIG_SUFFIXES: Final[tuple[str, ...]] = (".ts", ".js")


def detect_package_manager(
    context: DetectionContext,
    lockfiles: Sequence[tuple[str, PackageManager]],
    default: PackageManager,
) -> PackageManager:
    """Return the package manager whose lockfile appears first in ``lockfiles``."""

    for lockfile, manager in lockfiles:
        if context.file_exists(lockfile):
            return manager
    return default


def load_package_json(text: str | None) -> dict[str, Any]:
    """Return the parsed manifest, or an empty mapping when absent or invalid."""

    if not text:
        return {}
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        LOGGER.debug("ignoring malformed package.json: %s", exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def declares_dependency(manifest: dict[str, Any], package: str) -> bool:
    """Return ``True`` when ``package`` is a runtime or development dependency."""

    for section in ("dependencies", "devDependencies"):
        entries = manifest.get(section)
        if isinstance(entries, dict) and package in entries:
            return True
    return False


def first_existing(context: DetectionContext, candidates: Sequence[str]) -> str | None:
    """Return the first of ``candidates`` present in ``context``."""

    for candidate in candidates:
        if context.file_exists(candidate):
            return candidate
    return None


def existing_on_disk(project_root: str, candidates: Sequence[str]) -> str | None:
    """Return the first of ``candidates`` present below ``project_root`` on disk."""

    root = Path(project_root)
    return next((candidate for candidate in candidates if (root / candidate).exists()), None)


def config_candidates(*stems: str) -> tuple[str, ...]:
    """Expand config stems such as ``vitest.config`` into ``.ts`` and ``.js`` names."""

    return tuple(f"{stem}{suffix}" for stem in stems for suffix in JS_CONFIG_SUFFIXES)


__all__ = [
    "BUILD_LOCKFILES",
    "TEST_LOCKFILES",
    "config_candidates",
    "declares_dependency",
    "detect_package_manager",
    "existing_on_disk",
    "first_existing",
    "load_package_json",
]
