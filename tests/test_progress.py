# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for fix-loop progress tracking."""

from __future__ import annotations

from pathlib import Path

from qadoctor.progress import calculate_progress, read_file_list


def test_remaining_is_a_set_difference() -> None:
    report = calculate_progress(["a", "b", "c"], {"a", "b"})

    assert report.remaining == ["c"]
    assert report.percentage == 67
    assert not report.all_processed


def test_empty_initial_list_is_complete() -> None:
    report = calculate_progress([], set())

    assert report.all_processed
    assert report.percentage == 0
    assert report.remaining == []


def test_superset_of_fixes_exceeds_one_hundred_percent() -> None:
    report = calculate_progress(["a", "b"], {"a", "b", "c"})

    assert report.percentage == 150
    assert report.all_processed
    assert report.remaining == []


def test_extra_fixes_can_mask_remaining_files() -> None:
    report = calculate_progress(["a", "b"], ["a", "x"])

    assert report.all_processed
    assert report.remaining == ["b"]


def test_percentage_rounds_half_up() -> None:
    assert calculate_progress(["a", "b", "c"], ["a"]).percentage == 33
    assert calculate_progress(["a"] * 8, ["a"]).percentage == 13


def test_payload_uses_camel_case() -> None:
    payload = calculate_progress(["a"], ["a"]).model_dump(by_alias=True)

    assert payload == {"initialCount": 1, "fixedCount": 1, "remaining": [], "percentage": 100, "allProcessed": True}


def test_read_file_list(tmp_path: Path) -> None:
    listing = tmp_path / "files.txt"
    listing.write_text("src/a.ts\n\n  src/b.ts  \n", encoding="utf-8")

    assert read_file_list(listing) == ["src/a.ts", "src/b.ts"]
    assert read_file_list(tmp_path / "missing.txt") == []
