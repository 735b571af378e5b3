# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Grouping and ranking of parsed issues for fix planning."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from .adapters.base import FrameworkAdapter
from .models import ExcludedWarning, ExcludedWarningGroup, Issue, ParseResult
from .severity import IssueType

SECTION_BANNER_RE: Final[re.Pattern[str]] = re.compile(r"\n=+ (.+?) =+\n")
_TEST_TYPES: Final[frozenset[IssueType]] = frozenset({IssueType.TEST_FAILURE})
_TYPE_TYPES: Final[frozenset[IssueType]] = frozenset({IssueType.TYPE_ERROR, IssueType.BUILD_ERROR})
_LINT_TYPES: Final[frozenset[IssueType]] = frozenset({IssueType.LINT_ERROR, IssueType.FORMAT_ERROR})


def section_banner(name: str) -> str:
    """Return the banner line separating one validator's output from the next."""

    return f"\n========== {name} ==========\n"


def group_errors_by_file(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    """Group ``issues`` by file, most affected file first.

    Issues without a file are dropped. Files with equal counts keep the order
    in which they were first seen.
    """

    grouped: dict[str, list[Issue]] = {}
    for issue in issues:
        if not issue.file:
            continue
        grouped.setdefault(issue.file, []).append(issue)
    ordered = sorted(grouped.items(), key=lambda item: len(item[1]), reverse=True)
    return dict(ordered)


@dataclass(slots=True)
class FileIssueEntry:
    """Per-file issue counts split by category."""

    total: int = 0
    test: int = 0
    type: int = 0
    lint: int = 0

    def add(self, issue_type: IssueType) -> None:
        if issue_type in _TEST_TYPES:
            self.test += 1
        elif issue_type in _TYPE_TYPES:
            self.type += 1
        elif issue_type in _LINT_TYPES:
            self.lint += 1
        else:
            return
        self.total += 1

    def to_payload(self, file: str) -> dict[str, Any]:
        return {"file": file, "total": self.total, "test": self.test, "type": self.type, "lint": self.lint}


def tally_file_issues(issues: Iterable[Issue]) -> dict[str, FileIssueEntry]:
    """Return fresh per-file counts for ``issues``.

    Every call starts from zero, so repeated calls over the same issues give
    the same totals.
    """

    tallies: dict[str, FileIssueEntry] = {}
    for issue in issues:
        if not issue.file:
            continue
        tallies.setdefault(issue.file, FileIssueEntry()).add(issue.type)
    return tallies


def sort_by_impact(entries: Mapping[str, FileIssueEntry]) -> list[tuple[str, FileIssueEntry]]:
    """Return ``(file, entry)`` pairs ordered by descending total, stable on ties."""

    return sorted(entries.items(), key=lambda item: item[1].total, reverse=True)


def split_validation_sections(text: str) -> list[tuple[str, str]]:
    """Split banner-delimited validation output into ``(name, body)`` pairs.

    Anything before the first banner is discarded.
    """

    parts = SECTION_BANNER_RE.split(text)
    return [(parts[index].strip(), parts[index + 1]) for index in range(1, len(parts) - 1, 2)]


def parse_validation_sections(text: str, adapter: FrameworkAdapter[Any]) -> ParseResult:
    """Parse every section of saved validation output with its validator's rules."""

    result = ParseResult()
    for name, body in split_validation_sections(text):
        if body:
            result = result.merge(adapter.parse_validation_output(body, name))
    return result


def summarize_excluded_warnings(
    warnings: Sequence[ExcludedWarning],
    is_security: Callable[[str | None], bool],
) -> list[ExcludedWarningGroup]:
    """Group excluded warnings by rule code in first-seen order."""

    counts: dict[str, int] = {}
    for warning in warnings:
        code = warning.rule or "unknown"
        counts[code] = counts.get(code, 0) + 1
    return [ExcludedWarningGroup(rule=code, count=count, security=is_security(code)) for code, count in counts.items()]


def guess_build_framework(build_output: str, validate_output: str) -> str:
    """Return the build adapter name whose diagnostics appear in saved output.

    TypeScript is the fallback when neither toolchain leaves a recognisable
    marker.
    """

    combined = build_output + validate_output
    if "TS" in combined:
        return "typescript"
    if "CS" in combined or ".csproj" in build_output:
        return "dotnet"
    return "typescript"


__all__ = [
    "FileIssueEntry",
    "SECTION_BANNER_RE",
    "group_errors_by_file",
    "guess_build_framework",
    "parse_validation_sections",
    "section_banner",
    "sort_by_impact",
    "split_validation_sections",
    "summarize_excluded_warnings",
    "tally_file_issues",
]
