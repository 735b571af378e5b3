# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared line-rule dispatch used by every output parser.

Tool output is matched one line at a time against an ordered table of
:class:`LineRule` objects. The first rule whose pattern matches claims the
line; later rules are not consulted. Lines no rule claims are counted in
:attr:`ParseResult.unmatched_lines` and otherwise ignored, which keeps
parsing best-effort: output from an unfamiliar tool version degrades to fewer
issues rather than an exception.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Final

from ..models import ExcludedWarning, Issue, ParseResult
from ..severity import IssueType, Severity, parse_severity

_ANSI_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


@dataclass(slots=True)
class LineState:
    """Mutable scratch state shared by rules during one parse call.

    ESLint's stylish formatter prints a file header followed by indented rows,
    so row rules need to remember the most recent header.
    """

    current_file: str | None = None


IssueBuilder = Callable[[re.Match[str], LineState], Issue | None]


@dataclass(frozen=True, slots=True)
class LineRule:
    """Compiled pattern paired with the builder that turns a match into an issue.

    Attributes:
        name: Short identifier used in debug output and tests.
        pattern: Regular expression searched within each line.
        build: Callable returning an :class:`Issue`, or ``None`` when the
            line is recognised but carries no diagnostic (for example a file
            header).
    """

    name: str
    pattern: re.Pattern[str]
    build: IssueBuilder


@dataclass(frozen=True, slots=True)
class ExclusionPolicy:
    """Allow-list deciding which warnings are reported but never block success."""

    excluded_rules: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, rules: Iterable[str]) -> ExclusionPolicy:
        """Build a policy from any iterable of rule codes."""

        return cls(frozenset(code.strip() for code in rules if code and code.strip()))

    def excludes(self, issue: Issue) -> bool:
        """Return ``True`` when ``issue`` is an allow-listed warning."""

        return issue.severity is Severity.WARNING and issue.rule is not None and issue.rule in self.excluded_rules


NO_EXCLUSIONS: Final[ExclusionPolicy] = ExclusionPolicy()


def strip_ansi(text: str) -> str:
    """Remove terminal colour escapes emitted by tools that ignore ``NO_COLOR``."""

    return _ANSI_ESCAPE_RE.sub("", text)


def to_excluded(issue: Issue) -> ExcludedWarning:
    """Return ``issue`` recast as an :class:`ExcludedWarning`."""

    return ExcludedWarning(
        file=issue.file,
        line=issue.line,
        column=issue.column,
        rule=issue.rule,
        message=issue.message,
        test_name=issue.test_name,
        browser=issue.browser,
    )


def parse_lines(
    text: str,
    rules: Sequence[LineRule],
    *,
    policy: ExclusionPolicy = NO_EXCLUSIONS,
) -> ParseResult:
    """Apply ``rules`` to every line of ``text``.

    Args:
        text: Captured stdout/stderr of a tool.
        rules: Ordered dispatch table; the first match wins.
        policy: Allow-list routing matching warnings to ``excluded_warnings``.

    Returns:
        ParseResult: Issues in encounter order plus the unmatched line count.
    """

    errors: list[Issue] = []
    excluded: list[ExcludedWarning] = []
    unmatched = 0
    state = LineState()
    for raw_line in strip_ansi(text).splitlines():
        if not raw_line.strip():
            continue
        for rule in rules:
            match = rule.pattern.search(raw_line)
            if match is None:
                continue
            issue = rule.build(match, state)
            if issue is not None:
                if policy.excludes(issue):
                    excluded.append(to_excluded(issue))
                else:
                    errors.append(issue)
            break
        else:
            unmatched += 1
    return ParseResult(errors=errors, excluded_warnings=excluded, unmatched_lines=unmatched)


def optional_int(value: str | None) -> int | None:
    """Return ``value`` as an integer, or ``None`` when absent."""

    return int(value) if value else None


def located_issue(match: re.Match[str], issue_type: IssueType, **extra: object) -> Issue:
    """Build an issue from the conventional named groups of ``match``.

    Recognised groups are ``file``, ``line``, ``col``, ``severity``, ``code``
    and ``message``; any that the pattern does not define are left unset.
    Keyword arguments override the extracted values.
    """

    groups = match.groupdict()
    fields: dict[str, object] = {
        "file": groups.get("file"),
        "line": optional_int(groups.get("line")),
        "column": optional_int(groups.get("col")),
        "severity": parse_severity(groups.get("severity")),
        "rule": groups.get("code"),
        "message": (groups.get("message") or "").strip(),
        "type": issue_type,
    }
    fields.update(extra)
    return Issue.model_validate(fields)


def rule(name: str, pattern: str, build: IssueBuilder) -> LineRule:
    """Compile ``pattern`` into a :class:`LineRule`."""

    return LineRule(name=name, pattern=re.compile(pattern), build=build)


def typed(issue_type: IssueType, **extra: object) -> IssueBuilder:
    """Return a builder that emits :func:`located_issue` with ``issue_type``."""

    def _build(match: re.Match[str], _state: LineState) -> Issue:
        return located_issue(match, issue_type, **extra)

    return _build


__all__ = [
    "NO_EXCLUSIONS",
    "ExclusionPolicy",
    "IssueBuilder",
    "LineRule",
    "LineState",
    "located_issue",
    "optional_int",
    "parse_lines",
    "rule",
    "strip_ansi",
    "to_excluded",
    "typed",
]
