# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Inventory of skipped tests grouped by the reason they were skipped.

Reasons come from nearby comments or the test description and are bucketed
by keyword. The classification is a heuristic and has false positives.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from .adapters.base import FrameworkAdapter
from .context import DetectionContext

LOGGER = logging.getLogger(__name__)

NO_REASON: Final[str] = "No reason specified"
UNCATEGORIZED: Final[str] = "Other/Uncategorized"
COMMENT_LOOKBACK: Final[int] = 3
_MIN_COMMENT_LENGTH: Final[int] = 5
_MIN_DESCRIPTION_LENGTH: Final[int] = 3

_COMMENT_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"^//\s*")
_TASK_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"^(?:TODO|FIXME):\s*", re.IGNORECASE)
_DESCRIPTION_RE: Final[re.Pattern[str]] = re.compile(r"['\"`]([^'\"`]+)['\"`]")

# First matching bucket wins.
REASON_CATEGORIES: Final[tuple[tuple[str, re.Pattern[str]], ...]] = (
    ("Should be E2E tests", re.compile(r"e2e|end.to.end|integration|functional|should be covered")),
    (
        "Test environment limitations",
        re.compile(r"test environment|not working.*environment|difficult to test|mocking|mock"),
    ),
    (
        "Component logic issues",
        re.compile(r"component.*null|early return|conditional render|component logic|returns null"),
    ),
    ("Implementation details", re.compile(r"css|class|styling|style")),
    ("Validation display issues", re.compile(r"validation|error display|form validation")),
    ("Third-party library issues", re.compile(r"library|third.party|dependency|external")),
)


@dataclass(frozen=True, slots=True)
class SkippedTest:
    """One skip marker found in a test file."""

    file: str
    line: int
    skip_type: str
    reason: str
    category: str

    @property
    def reason_key(self) -> str:
        return self.reason.lower().strip()


def extract_skip_reason(lines: Sequence[str], index: int, line: str) -> str:
    """Return the reason for the skip marker on ``lines[index]``.

    Up to three preceding ``//`` comments are considered, nearest first,
    with ``TODO:``/``FIXME:`` markers dropped. A quoted test description is
    the fallback.
    """

    for offset in range(1, COMMENT_LOOKBACK + 1):
        position = index - offset
        if position < 0:
            break
        stripped = lines[position].strip()
        if not stripped.startswith("//"):
            continue
        comment = _TASK_MARKER_RE.sub("", _COMMENT_PREFIX_RE.sub("", stripped)).strip()
        if len(comment) > _MIN_COMMENT_LENGTH:
            return comment
    if (match := _DESCRIPTION_RE.search(line)) and len(match.group(1)) > _MIN_DESCRIPTION_LENGTH:
        return match.group(1)
    return NO_REASON


def categorize_reason(reason: str) -> str:
    """Return the bucket ``reason`` falls into."""

    lowered = reason.lower()
    return next((label for label, pattern in REASON_CATEGORIES if pattern.search(lowered)), UNCATEGORIZED)


def scan_lines(relative_path: str, lines: Sequence[str], skip_patterns: Sequence[re.Pattern[str]]) -> list[SkippedTest]:
    """Return skip markers in ``lines``; at most one per line."""

    found: list[SkippedTest] = []
    for index, line in enumerate(lines):
        for pattern in skip_patterns:
            if match := pattern.search(line):
                reason = extract_skip_reason(lines, index, line)
                found.append(
                    SkippedTest(
                        file=relative_path,
                        line=index + 1,
                        skip_type=match.group(0),
                        reason=reason,
                        category=categorize_reason(reason),
                    )
                )
                break
    return found


def find_test_files(context: DetectionContext, patterns: Iterable[str]) -> list[str]:
    """Return relative test file paths matching any of ``patterns``, deduplicated."""

    seen: dict[str, None] = {}
    for pattern in patterns:
        for path in context.glob(pattern):
            seen.setdefault(path, None)
    return list(seen)


def find_skipped_tests(project_root: Path, adapter: FrameworkAdapter[Any]) -> list[SkippedTest]:
    """Scan ``project_root`` for tests skipped with the adapter's skip markers."""

    context = DetectionContext.for_root(project_root)
    skip_patterns = [re.compile(pattern) for pattern in adapter.get_skip_patterns()]
    skipped: list[SkippedTest] = []
    for relative_path in find_test_files(context, adapter.get_test_file_patterns()):
        content = context.try_read(relative_path)
        if content is None:
            continue
        skipped.extend(scan_lines(relative_path, content.split("\n"), skip_patterns))
    return skipped


def group_skipped_tests(tests: Iterable[SkippedTest]) -> dict[str, dict[str, list[SkippedTest]]]:
    """Group ``tests`` by category, then by normalised reason, in first-seen order."""

    groups: dict[str, dict[str, list[SkippedTest]]] = {}
    for test in tests:
        groups.setdefault(test.category, {}).setdefault(test.reason_key, []).append(test)
    return groups


def skipped_payload(tests: Sequence[SkippedTest]) -> dict[str, Any]:
    """Return the JSON report with per-category and per-reason counts."""

    categories = []
    for category, reasons in group_skipped_tests(tests).items():
        categories.append(
            {
                "category": category,
                "count": sum(len(entries) for entries in reasons.values()),
                "reasons": [
                    {
                        "reason": entries[0].reason,
                        "count": len(entries),
                        "tests": [
                            {"file": entry.file, "line": entry.line, "skipType": entry.skip_type} for entry in entries
                        ],
                    }
                    for entries in reasons.values()
                ],
            }
        )
    return {"total": len(tests), "categories": categories}


__all__ = [
    "NO_REASON",
    "REASON_CATEGORIES",
    "UNCATEGORIZED",
    "SkippedTest",
    "categorize_reason",
    "extract_skip_reason",
    "find_skipped_tests",
    "find_test_files",
    "group_skipped_tests",
    "scan_lines",
    "skipped_payload",
]
