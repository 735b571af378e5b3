# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Progress tracking for the fix-and-verify loop.

Progress is recomputed from two explicit file lists on every call, so an
interrupted loop leaves unattempted files correctly listed as remaining.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProgressReport(BaseModel):
    """Outcome of comparing the files that had issues with the files fixed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    initial_count: int
    fixed_count: int
    remaining: list[str] = Field(default_factory=list)
    percentage: int
    all_processed: bool


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_progress(initial_files: Sequence[str], fixed_files: Iterable[str]) -> ProgressReport:
    """Return progress of ``fixed_files`` against ``initial_files``.

    ``fixed_files`` may contain files that never had issues, in which case the
    percentage exceeds 100. ``all_processed`` compares counts rather than
    checking ``remaining`` for the same reason.
    """

    fixed = set(fixed_files)
    initial_count = len(initial_files)
    fixed_count = len(fixed)
    percentage = _round_half_up(fixed_count / initial_count * 100) if initial_count else 0
    return ProgressReport(
        initial_count=initial_count,
        fixed_count=fixed_count,
        remaining=[file for file in initial_files if file not in fixed],
        percentage=percentage,
        all_processed=fixed_count >= initial_count,
    )


def read_file_list(path: Path) -> list[str]:
    """Return the non-blank, stripped lines of ``path``; empty when it is missing."""

    if not path.is_file():
        return []
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


__all__ = ["ProgressReport", "calculate_progress", "read_file_list"]
