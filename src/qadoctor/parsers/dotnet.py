# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line rules for MSBuild, Roslyn, NuGet and ``dotnet format`` output."""

from __future__ import annotations

from typing import Final

from ..severity import IssueType
from .base import LineRule, rule, typed

# Optional drive prefix so ``C:\src\File.cs`` keeps its drive letter.
_DRIVE: Final[str] = r"(?:[A-Za-z]:[\\/])?"
_PROJECT_SUFFIX: Final[str] = r"(?:\s+\[(?P<project>[^\]]+)\])?\s*$"

ROSLYN_PATTERN: Final[str] = (
    rf"(?P<file>{_DRIVE}[^\s(:][^(:]*\.cs)\((?P<line>\d+),(?P<col>\d+)\):\s+"
    rf"(?P<severity>error|warning)\s+(?P<code>[A-Z]{{2,}}\d+):\s+(?P<message>.+?){_PROJECT_SUFFIX}"
)
NUGET_PATTERN: Final[str] = (
    rf"(?P<file>{_DRIVE}[^\s:][^:]*\.(?:cs|fs|vb)proj)\s*:\s*"
    rf"(?P<severity>warning|error)\s+(?P<code>NU\d+):\s+(?P<message>.+?){_PROJECT_SUFFIX}"
)
_CSC_PATTERN: Final[str] = (
    r"CSC\s*:\s*(?P<severity>warning|error)\s+(?P<code>[A-Z]+\d+):\s+(?P<message>.+?)"
    r"\s+\[(?P<file>[^\]]+\.csproj)\]"
)
_MSBUILD_PATTERN: Final[str] = r"(?P<severity>error|warning)\s+(?P<code>MSB\d+):\s+(?P<message>.+?)" + _PROJECT_SUFFIX
_FORMAT_PATTERN: Final[str] = (
    rf"(?P<file>{_DRIVE}[^\s(:][^(:]*\.cs)\((?P<line>\d+),(?P<col>\d+)\):\s+"
    rf"(?P<severity>warning|error)(?:\s+(?P<code>[A-Z]+\d*))?:\s+(?P<message>.+?){_PROJECT_SUFFIX}"
)

BUILD_RULES: Final[tuple[LineRule, ...]] = (
    rule("roslyn", ROSLYN_PATTERN, typed(IssueType.BUILD_ERROR)),
    rule("nuget", NUGET_PATTERN, typed(IssueType.BUILD_ERROR)),
    rule("csc", _CSC_PATTERN, typed(IssueType.BUILD_ERROR)),
    rule("msbuild", _MSBUILD_PATTERN, typed(IssueType.BUILD_ERROR)),
)

FORMAT_RULES: Final[tuple[LineRule, ...]] = (rule("dotnet-format", _FORMAT_PATTERN, typed(IssueType.FORMAT_ERROR)),)


__all__ = [
    "BUILD_RULES",
    "FORMAT_RULES",
    "NUGET_PATTERN",
    "ROSLYN_PATTERN",
]
