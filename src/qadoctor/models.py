# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the qadoctor package."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .severity import IssueType, Severity


class Issue(BaseModel):
    """Normalized diagnostic extracted from build, lint or test output."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    file: str | None = None
    line: int | None = None
    column: int | None = None
    severity: Severity = Severity.ERROR
    rule: str | None = None
    message: str = ""
    type: IssueType
    test_name: str | None = None
    browser: str | None = None

    def matches_file(self, target: str) -> bool:
        """Return ``True`` when the issue's file path contains ``target``."""

        return bool(self.file) and target in str(self.file)

    @property
    def location(self) -> str:
        """Render ``file:line:column`` for console output."""

        if self.line is None:
            return self.file or "<unknown>"
        return f"{self.file or '<unknown>'}:{self.line}:{self.column or 0}"


class ExcludedWarning(Issue):
    """Allow-listed warning tracked for reporting but never blocking success."""

    severity: Severity = Severity.WARNING
    type: IssueType = IssueType.EXCLUDED_WARNING

    @model_validator(mode="after")
    def _force_category(self) -> ExcludedWarning:
        if self.type is not IssueType.EXCLUDED_WARNING or self.severity is not Severity.WARNING:
            raise ValueError("excluded warnings must carry the excluded-warning type and warning severity")
        return self


class ParseResult(BaseModel):
    """Issues recovered from one blob of tool output.

    ``unmatched_lines`` counts non-blank lines no pattern recognised. They are
    informational only and never turn into issues.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    errors: list[Issue] = Field(default_factory=list)
    excluded_warnings: list[ExcludedWarning] = Field(default_factory=list)
    unmatched_lines: int = 0

    @property
    def has_errors(self) -> bool:
        """Return ``True`` when any blocking issue was parsed."""

        return bool(self.errors)

    def merge(self, other: ParseResult) -> ParseResult:
        """Return a new result concatenating ``self`` and ``other`` in order."""

        return ParseResult(
            errors=[*self.errors, *other.errors],
            excluded_warnings=[*self.excluded_warnings, *other.excluded_warnings],
            unmatched_lines=self.unmatched_lines + other.unmatched_lines,
        )

    def for_file(self, target: str) -> ParseResult:
        """Return the subset of blocking issues that refer to ``target``."""

        return ParseResult(
            errors=[issue for issue in self.errors if issue.matches_file(target)],
            excluded_warnings=[warning for warning in self.excluded_warnings if warning.matches_file(target)],
            unmatched_lines=self.unmatched_lines,
        )


class ValidationCommand(BaseModel):
    """Quality gate command executed before the build or test run."""

    model_config = ConfigDict(frozen=True)

    name: str
    command: str
    optional: bool = False


class ParallelStrategy(BaseModel):
    """Static parallelism hint published by an adapter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    max_workers: int
    stagger_delay_ms: int = 0
    requires_isolation: bool = False
    isolation_note: str | None = None


class ExcludedWarningGroup(BaseModel):
    """Excluded warnings sharing a rule code."""

    model_config = ConfigDict(frozen=True)

    rule: str
    count: int
    security: bool = False


class DetectionResult(BaseModel):
    """Stable JSON record describing one detected project."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    framework: str
    display_name: str
    build_type: str | None = None
    test_type: str | None = None
    project_root: str
    config: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase payload consumed by orchestration scripts."""

        payload = self.model_dump(mode="json", by_alias=True)
        for key in ("buildType", "testType"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


__all__ = [
    "DetectionResult",
    "ExcludedWarning",
    "ExcludedWarningGroup",
    "Issue",
    "ParallelStrategy",
    "ParseResult",
    "ValidationCommand",
]
