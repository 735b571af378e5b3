# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line rules for Vitest/Jest, Playwright and ``dotnet test`` reporters."""

from __future__ import annotations

import re
from typing import Final

from ..models import Issue
from ..severity import IssueType
from .base import LineRule, LineState, located_issue, rule, typed

_STACK_FRAME_MESSAGE: Final[str] = "Stack frame"
_THIRD_PARTY_FRAME_RE: Final[re.Pattern[str]] = re.compile(r"node_modules|^node:|^internal/")


def _failed_test(match: re.Match[str], _state: LineState) -> Issue:
    groups = match.groupdict()
    test_name = groups.get("test")
    if groups.get("suite"):
        test_name = f"{groups['suite']} > {test_name}"
    return located_issue(
        match,
        IssueType.TEST_FAILURE,
        test_name=test_name.strip() if test_name else None,
        browser=groups.get("browser"),
    )


def _project_frame(match: re.Match[str], _state: LineState) -> Issue | None:
    if _THIRD_PARTY_FRAME_RE.search(match.group("file")):
        return None
    return located_issue(match, IssueType.TEST_FAILURE, message=_STACK_FRAME_MESSAGE)


def _whole_line(match: re.Match[str], _state: LineState) -> Issue:
    return located_issue(match, IssueType.TEST_FAILURE, message=match.string.strip())


VITEST_RULES: Final[tuple[LineRule, ...]] = (
    rule("vitest-fail", r"(?:❌|✗|×)\s+(?P<file>\S+?)\s+>\s+(?P<test>.+)", _failed_test),
    rule("jest-bullet", r"●\s+(?P<suite>.+?)\s+›\s+(?P<test>.+)", _failed_test),
    rule(
        "fail-marker",
        r"FAIL\s+(?P<file>\S+\.(?:test|spec)\.[cm]?[jt]sx?)(?:\s+>\s+(?P<test>.+))?",
        _failed_test,
    ),
    rule("vitest-frame", r"❯\s+(?P<file>[^\s:]+\.[cm]?[jt]sx?):(?P<line>\d+):(?P<col>\d+)", _project_frame),
    rule("stack-frame", r"at\s+.+?\((?P<file>.+?):(?P<line>\d+):(?P<col>\d+)\)", _project_frame),
)

PLAYWRIGHT_RULES: Final[tuple[LineRule, ...]] = (
    rule(
        "playwright-fail",
        r"[✘×]\s+(?:\d+\s+)?\[(?P<browser>.+?)\]\s+›\s+(?P<file>.+?):(?P<line>\d+):(?P<col>\d+)\s+›\s+(?P<test>.+)",
        _failed_test,
    ),
    rule(
        "playwright-fail-plain",
        r"[✘×]\s+(?:\d+\s+)?(?P<file>[^\s\[].*?):(?P<line>\d+):(?P<col>\d+)\s+›\s+(?P<test>.+)",
        _failed_test,
    ),
    rule("spec-frame", r"at\s+(?P<file>.+\.spec\.[jt]s):(?P<line>\d+):(?P<col>\d+)", _project_frame),
    rule("timeout", r"[Tt]imeout", _whole_line),
)

DOTNET_TEST_RULES: Final[tuple[LineRule, ...]] = (
    rule("failed-test", r"Failed\s+(?P<test>.+?)\s+\[", _failed_test),
    rule(
        "source-location",
        r"(?P<file>(?:[A-Za-z]:\\|/)[^(]+\.cs)\((?P<line>\d+),(?P<col>\d+)\)",
        typed(IssueType.BUILD_ERROR),
    ),
    rule(
        "stack-location",
        r"\bin\s+(?P<file>\S.*?\.cs):line\s+(?P<line>\d+)",
        typed(IssueType.TEST_FAILURE, message=_STACK_FRAME_MESSAGE),
    ),
    rule("assertion", r"(?:Expected|Actual):", _whole_line),
)


__all__ = [
    "DOTNET_TEST_RULES",
    "PLAYWRIGHT_RULES",
    "VITEST_RULES",
]
