# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Skipped test inventory command."""

from __future__ import annotations

from pathlib import Path

import typer

from ...logging import ok, section
from ...skipped import find_skipped_tests, group_skipped_tests, skipped_payload
from ..shared import cli_errors, emit_json, load_cli_context, select_project
from ..typer_ext import SortedTyper


def skipped_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Project directory (default: git root)."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """List skipped tests grouped by category and reason."""

    with cli_errors():
        ctx = load_cli_context(directory)
        project = select_project(ctx, tests=True)
        skipped = find_skipped_tests(project.project_root, project.adapter)

    if as_json:
        emit_json(skipped_payload(skipped))
        return
    if not skipped:
        ok("No skipped tests found", use_emoji=ctx.use_emoji)
        return

    console = ctx.stdout()
    console.print(f"Found {len(skipped)} skipped tests:")
    grouped = group_skipped_tests(skipped)
    by_size = sorted(grouped.items(), key=lambda item: sum(len(tests) for tests in item[1].values()), reverse=True)
    for category, reasons in by_size:
        section(f"{category} ({sum(len(tests) for tests in reasons.values())} tests)", use_color=ctx.use_color)
        for tests in sorted(reasons.values(), key=len, reverse=True):
            console.print(f'  Reason: "{tests[0].reason}" ({len(tests)} tests)', markup=False)
            for test in tests:
                console.print(f"    {test.file}:{test.line}  {test.skip_type}", markup=False)


def register(app: SortedTyper) -> None:
    app.command(name="skipped")(skipped_command)


__all__ = ["register", "skipped_command"]
