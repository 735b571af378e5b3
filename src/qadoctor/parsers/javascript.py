# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line rules for TypeScript, bundler, ESLint and Prettier output."""

from __future__ import annotations

import re
from typing import Final

from ..models import Issue
from ..severity import IssueType
from .base import LineRule, LineState, located_issue, rule, typed

_JS_EXT: Final[str] = r"[cm]?[jt]sx?"

TSC_PAREN_PATTERN: Final[str] = (
    r"(?P<file>.+\.tsx?)\((?P<line>\d+),(?P<col>\d+)\):\s+"
    r"(?P<severity>error|warning)\s+(?P<code>TS\d+):\s+(?P<message>.+)"
)
TSC_DASH_PATTERN: Final[str] = (
    r"(?P<file>.+\.tsx?):(?P<line>\d+):(?P<col>\d+)\s+-\s+"
    r"(?P<severity>error|warning)\s+(?P<code>TS\d+):\s+(?P<message>.+)"
)
_BUNDLER_PATTERN: Final[str] = r"ERROR in (?P<file>\S+\.(?:ts|tsx|js|jsx))"
_ESBUILD_PATTERN: Final[str] = (
    r"\[ERROR\]\s+(?P<message>.+?)\s+\[(?P<file>.+\.(?:ts|tsx|js|jsx)):(?P<line>\d+):(?P<col>\d+)\]"
)
_ESLINT_HEADER_PATTERN: Final[str] = rf"^\s*(?P<file>(?:[A-Za-z]:[\\/])?[^\s:][^:]*\.{_JS_EXT})\s*$"
_ESLINT_ROW_PATTERN: Final[str] = (
    r"^\s+(?P<line>\d+):(?P<col>\d+)\s+(?P<severity>error|warning)\s+"
    r"(?P<message>.+?)\s+(?P<code>[\w@/.-]+)\s*$"
)
_PRETTIER_PATTERN: Final[str] = rf"^(?:\[warn\]\s+)?(?P<file>[^\s\[]\S*\.{_JS_EXT})\s*$"


def tsc_rules(issue_type: IssueType) -> tuple[LineRule, ...]:
    """Return rules for both ``tsc`` diagnostic layouts tagged with ``issue_type``."""

    return (
        rule("tsc-paren", TSC_PAREN_PATTERN, typed(issue_type)),
        rule("tsc-dash", TSC_DASH_PATTERN, typed(issue_type)),
    )


BUILD_RULES: Final[tuple[LineRule, ...]] = (
    *tsc_rules(IssueType.BUILD_ERROR),
    rule("bundler", _BUNDLER_PATTERN, typed(IssueType.BUILD_ERROR, message="Build error")),
    rule("esbuild", _ESBUILD_PATTERN, typed(IssueType.BUILD_ERROR)),
)

TSC_RULES: Final[tuple[LineRule, ...]] = tsc_rules(IssueType.TYPE_ERROR)


def _eslint_header(match: re.Match[str], state: LineState) -> None:
    state.current_file = match.group("file").strip()


def _eslint_row(match: re.Match[str], state: LineState) -> Issue | None:
    if state.current_file is None:
        return None
    return located_issue(match, IssueType.LINT_ERROR, file=state.current_file)


ESLINT_RULES: Final[tuple[LineRule, ...]] = (
    rule("eslint-file", _ESLINT_HEADER_PATTERN, _eslint_header),
    rule("eslint-row", _ESLINT_ROW_PATTERN, _eslint_row),
)

PRETTIER_RULES: Final[tuple[LineRule, ...]] = (
    rule("prettier", _PRETTIER_PATTERN, typed(IssueType.FORMAT_ERROR, message="Code style issues")),
)


__all__ = [
    "BUILD_RULES",
    "ESLINT_RULES",
    "PRETTIER_RULES",
    "TSC_DASH_PATTERN",
    "TSC_PAREN_PATTERN",
    "TSC_RULES",
    "tsc_rules",
]
