# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Single-file verification and fix-loop progress commands."""

from __future__ import annotations

from pathlib import Path

import typer

from ...console import detect_tty
from ...logging import fail, indented, info, ok, section, warn
from ...progress import calculate_progress, read_file_list
from ...verification import verify_file
from ..shared import cli_errors, emit_json, load_cli_context, select_project
from ..typer_ext import SortedTyper


def verify_command(
    file: str = typer.Argument(..., help="File to verify, relative to the project root."),
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Project directory (default: git root)."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    tests: bool = typer.Option(False, "--tests", help="Verify with the test runner instead of the build."),
) -> None:
    """Check whether FILE still has issues after a fix attempt."""

    with cli_errors():
        ctx = load_cli_context(directory)
        project = select_project(ctx, tests=tests)
        adapter = project.adapter
        config = adapter.resolve_config(project.context)
        result = verify_file(file, adapter, config, runner=ctx.runner(project.project_root))

    if as_json:
        emit_json(result.to_payload())
    elif result.deferred_verification:
        info(f"File verification deferred: {file}", use_emoji=ctx.use_emoji)
        info("Single-file verification is not supported; the final pass will confirm it.", use_emoji=ctx.use_emoji)
    elif result.fixed:
        ok(f"File fixed: {file} (0 issues)", use_emoji=ctx.use_emoji)
    else:
        fail(f"File still has issues: {file} ({result.error_count} issues)", use_emoji=ctx.use_emoji)
        for issue in result.errors:
            typer.echo(f"  {issue.location if issue.file else file}: [{issue.severity.value}] {issue.message}")

    if not (result.fixed or result.deferred_verification):
        raise typer.Exit(code=1)


def progress_command(
    initial: Path = typer.Argument(..., help="File listing paths that had issues, one per line."),
    fixed: Path = typer.Argument(..., help="File listing paths confirmed fixed, one per line."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Compare the files that had issues with the files fixed so far."""

    report = calculate_progress(read_file_list(initial), read_file_list(fixed))
    if as_json:
        emit_json(report.model_dump(mode="json", by_alias=True))
    else:
        section("Progress verification", use_color=detect_tty(stderr=True))
        info(f"Initial files with errors: {report.initial_count}", use_emoji=True)
        info(f"Files fixed: {report.fixed_count}", use_emoji=True)
        info(f"Progress: {report.fixed_count}/{report.initial_count} ({report.percentage}%)", use_emoji=True)
        if report.all_processed:
            ok("All files have been processed!", use_emoji=True)
        else:
            warn("Not all files have been processed!", use_emoji=True)
            indented(report.remaining, bullet="- ")
            info(f"Total remaining: {len(report.remaining)}", use_emoji=True)

    if not report.all_processed:
        raise typer.Exit(code=1)


def register(app: SortedTyper) -> None:
    app.command(name="verify")(verify_command)
    app.command(name="progress")(progress_command)


__all__ = ["progress_command", "register", "verify_command"]
