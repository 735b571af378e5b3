# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Commands that execute validation, build and test toolchains."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer

from ...aggregate import summarize_excluded_warnings
from ...execution import FINAL_OUTPUT_NAME, StepOutcome, run_build, run_final_validation, run_validation
from ...logging import fail, info, ok, section, warn
from ...models import ExcludedWarning
from ..shared import CLIContext, cli_errors, load_cli_context, select_project
from ..typer_ext import SortedTyper


def _report_steps(steps: Sequence[StepOutcome], *, use_emoji: bool) -> None:
    for step in steps:
        if step.passed:
            ok(f"{step.name} passed", use_emoji=use_emoji)
        elif step.optional:
            warn(f"{step.name} failed (optional)", use_emoji=use_emoji)
        else:
            warn(f"{step.name} failed (exit code {step.result.exit_code})", use_emoji=use_emoji)


def report_excluded(ctx: CLIContext, warnings: Sequence[ExcludedWarning]) -> None:
    """Summarise allow-listed warnings by rule code, flagging advisories."""

    groups = summarize_excluded_warnings(warnings, ctx.config.is_security_code)
    if not groups:
        return
    section("Excluded warnings (not blocking)", use_color=ctx.use_color)
    for group in groups:
        plural = "s" if group.count > 1 else ""
        label = "SECURITY WARNING" if group.security else "WARNING"
        warn(f"{group.rule} ({group.count} occurrence{plural}) - {label}", use_emoji=ctx.use_emoji)
    if any(group.security for group in groups):
        warn("Review security advisories before release.", use_emoji=ctx.use_emoji)


def run_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Project directory (default: git root)."),
    tests: bool = typer.Option(False, "--tests", help="Run the test runner instead of the build."),
) -> None:
    """Run validation and build (or tests), saving output for ``parse``."""

    with cli_errors():
        ctx = load_cli_context(directory)
        project = select_project(ctx, tests=tests)
        adapter = project.adapter
        config = adapter.resolve_config(project.context)
        runner = ctx.runner(project.project_root)
        output = ctx.config.output

        section(f"{adapter.get_display_name(config)}", use_color=ctx.use_color)
        info(f"Project root: {project.project_root}", use_emoji=ctx.use_emoji)

        validation = run_validation(adapter, config, runner)
        _report_steps(validation.steps, use_emoji=ctx.use_emoji)
        saved = validation.write(project.project_root / output.validate_output_name)
        info(f"Validation output saved to: {saved}", use_emoji=ctx.use_emoji)

        build = run_build(adapter, config, runner)
        _report_steps(build.steps, use_emoji=ctx.use_emoji)
        saved = build.write(project.project_root / output.build_output_name)
        info(f"Build output saved to: {saved}", use_emoji=ctx.use_emoji)

        if build.failed:
            fail("Build failed", use_emoji=ctx.use_emoji)
        else:
            ok("Build completed", use_emoji=ctx.use_emoji)
        info("Next: qadoctor parse", use_emoji=ctx.use_emoji)


def final_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Project directory (default: git root)."),
    tests: bool = typer.Option(False, "--tests", help="Run the test runner instead of the build."),
) -> None:
    """Run the closing whole-project pass and remove scratch output files."""

    with cli_errors():
        ctx = load_cli_context(directory)
        project = select_project(ctx, tests=tests)
        adapter = project.adapter
        config = adapter.resolve_config(project.context)
        output = ctx.config.output

        section(f"Final validation: {adapter.get_display_name(config)}", use_color=ctx.use_color)
        outcome = run_final_validation(
            adapter,
            config,
            ctx.runner(project.project_root),
            scratch_files=(output.build_output_name, output.validate_output_name, FINAL_OUTPUT_NAME),
        )
        _report_steps([*outcome.validation.steps, *outcome.build.steps], use_emoji=ctx.use_emoji)
        for path in outcome.removed_files:
            info(f"Cleaned up: {path.name}", use_emoji=ctx.use_emoji)
        for error in outcome.invocation_errors:
            fail(str(error), use_emoji=ctx.use_emoji)
        report_excluded(ctx, outcome.excluded_warnings)

        if not outcome.passed:
            fail(f"Final validation failed ({outcome.error_count} errors)", use_emoji=ctx.use_emoji)
            raise typer.Exit(code=1)
        ok("Final validation passed (0 errors)", use_emoji=ctx.use_emoji)


def register(app: SortedTyper) -> None:
    app.command(name="run")(run_command)
    app.command(name="final")(final_command)


__all__ = ["final_command", "register", "report_excluded", "run_command"]
