# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public parser exports for converting tool output into issues."""

from __future__ import annotations

from . import dotnet, javascript, testing
from .base import NO_EXCLUSIONS, ExclusionPolicy, LineRule, LineState, parse_lines, strip_ansi

__all__ = [
    "NO_EXCLUSIONS",
    "ExclusionPolicy",
    "LineRule",
    "LineState",
    "dotnet",
    "javascript",
    "parse_lines",
    "strip_ansi",
    "testing",
]
