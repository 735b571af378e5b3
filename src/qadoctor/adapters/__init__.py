# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Framework adapters and the closed registries that order them.

Registry order is detection priority: the first adapter to match a context
wins the primary slot.
"""

from __future__ import annotations

from typing import Any

from ..config import DoctorConfig
from .base import AdapterKind, BuildAdapter, FrameworkAdapter, SuiteAdapter
from .dotnet import DotNetAdapter
from .dotnet_test import DotNetTestAdapter
from .playwright import PlaywrightAdapter
from .typescript import TypeScriptAdapter
from .vitest import VitestAdapter


def build_adapters(config: DoctorConfig | None = None) -> list[BuildAdapter[Any]]:
    """Return build adapters in priority order: TypeScript, then .NET."""

    settings = (config or DoctorConfig()).exclusions
    return [
        TypeScriptAdapter(settings.typescript_excluded_warnings),
        DotNetAdapter(settings.dotnet_excluded_warnings),
    ]


def test_adapters(config: DoctorConfig | None = None) -> list[SuiteAdapter[Any]]:
    """Return test adapters in priority order: Vitest, Playwright, then .NET test."""

    settings = (config or DoctorConfig()).exclusions
    return [
        VitestAdapter(settings.typescript_excluded_warnings),
        PlaywrightAdapter(settings.typescript_excluded_warnings),
        DotNetTestAdapter(settings.dotnet_excluded_warnings),
    ]


# Keep pytest from collecting the registry factory as a test function.
test_adapters.__test__ = False  # type: ignore[attr-defined]


def all_adapters(config: DoctorConfig | None = None) -> list[FrameworkAdapter[Any]]:
    """Return every registered adapter, build adapters first."""

    return [*build_adapters(config), *test_adapters(config)]


def adapter_by_name(name: str, config: DoctorConfig | None = None) -> FrameworkAdapter[Any]:
    """Return the registered adapter called ``name``.

    Raises:
        KeyError: If no adapter is registered under ``name``.
    """

    for adapter in all_adapters(config):
        if adapter.name == name:
            return adapter
    raise KeyError(name)


def adapters_for(kind: AdapterKind, config: DoctorConfig | None = None) -> list[FrameworkAdapter[Any]]:
    """Return the registry for ``kind`` (``build`` or ``test``)."""

    if kind == "test":
        return list(test_adapters(config))
    return list(build_adapters(config))


__all__ = [
    "AdapterKind",
    "BuildAdapter",
    "DotNetAdapter",
    "DotNetTestAdapter",
    "FrameworkAdapter",
    "PlaywrightAdapter",
    "SuiteAdapter",
    "TypeScriptAdapter",
    "VitestAdapter",
    "adapter_by_name",
    "adapters_for",
    "all_adapters",
    "build_adapters",
    "test_adapters",
]
