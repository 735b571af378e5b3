# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity and issue category vocabularies shared by every parser."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels emitted by build, lint and test tooling."""

    ERROR = "error"
    WARNING = "warning"


class IssueType(str, Enum):
    """Coarse category attached to every parsed issue."""

    BUILD_ERROR = "build-error"
    TYPE_ERROR = "type-error"
    LINT_ERROR = "lint-error"
    FORMAT_ERROR = "format-error"
    TEST_FAILURE = "test-failure"
    EXCLUDED_WARNING = "excluded-warning"


DEFAULT_SECURITY_PREFIXES: Final[tuple[str, ...]] = ("NU1901", "NU1902", "NU1903", "NU1904")
# Warnings that never block a .NET build by default.
# NU1902: vulnerable NuGet package awaiting an upstream fix.
# DX1000: DevExpress evaluation licence notice.
DEFAULT_DOTNET_EXCLUSIONS: Final[tuple[str, ...]] = ("NU1902", "DX1000")


def parse_severity(label: str | None, default: Severity = Severity.ERROR) -> Severity:
    """Return the :class:`Severity` named by ``label`` (case-insensitive)."""

    if not label:
        return default
    try:
        return Severity(label.strip().lower())
    except ValueError:
        return default


def is_security_code(rule: str | None, prefixes: Iterable[str] = DEFAULT_SECURITY_PREFIXES) -> bool:
    """Return ``True`` when ``rule`` belongs to a vulnerability-advisory namespace."""

    if not rule:
        return False
    return any(rule.startswith(prefix) for prefix in prefixes)


__all__ = [
    "DEFAULT_DOTNET_EXCLUSIONS",
    "DEFAULT_SECURITY_PREFIXES",
    "IssueType",
    "Severity",
    "is_security_code",
    "parse_severity",
]
