# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Commands that parse saved tool output into per-file reports."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

import typer
from rich import box
from rich.table import Table

from ...adapters import FrameworkAdapter, adapter_by_name
from ...aggregate import (
    group_errors_by_file,
    guess_build_framework,
    parse_validation_sections,
    sort_by_impact,
    tally_file_issues,
)
from ...errors import DoctorError
from ...logging import info, ok
from ...models import ParseResult
from ..shared import CLIContext, OutputFormat, cli_errors, emit_json, load_cli_context
from ..typer_ext import SortedTyper
from .run import report_excluded

_PATH_WIDTH: Final[int] = 58
STDIN_MARKER: Final[str] = "-"


def _lookup_adapter(ctx: CLIContext, name: str) -> FrameworkAdapter[Any]:
    try:
        return adapter_by_name(name, ctx.config)
    except KeyError as exc:
        raise typer.BadParameter(f"Unknown framework: {name}", param_hint="--framework") from exc


def _shorten(path: str) -> str:
    return path if len(path) <= _PATH_WIDTH else "..." + path[-(_PATH_WIDTH - 3) :]


def parse_saved_output(build_text: str, validate_text: str, adapter: FrameworkAdapter[Any]) -> ParseResult:
    """Parse build and validation transcripts written by ``run``."""

    build = adapter.parse_primary_output(build_text) if build_text else ParseResult()
    validation = parse_validation_sections(validate_text, adapter) if validate_text else ParseResult()
    return build.merge(validation)


def parse_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Directory holding the saved output."),
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", help="Output format."),
    framework: str | None = typer.Option(None, "--framework", help="Adapter name; guessed from output when omitted."),
) -> None:
    """Group issues from saved build and validation output by file."""

    with cli_errors():
        ctx = load_cli_context(directory)
        build_path = ctx.root / ctx.config.output.build_output_name
        validate_path = ctx.root / ctx.config.output.validate_output_name
        if not build_path.is_file() and not validate_path.is_file():
            raise DoctorError(
                f"No output files found ({build_path.name} or {validate_path.name}); run 'qadoctor run' first"
            )
        build_text = build_path.read_text(encoding="utf-8") if build_path.is_file() else ""
        validate_text = validate_path.read_text(encoding="utf-8") if validate_path.is_file() else ""

        adapter = _lookup_adapter(ctx, framework or guess_build_framework(build_text, validate_text))
        info(f"Using {adapter.display_name} parser", use_emoji=ctx.use_emoji)
        result = parse_saved_output(build_text, validate_text, adapter)
        grouped = group_errors_by_file(result.errors)

        if output_format is OutputFormat.JSON:
            emit_json(
                [
                    {
                        "file": file,
                        "errorCount": len(issues),
                        "errors": [issue.model_dump(mode="json", by_alias=True) for issue in issues],
                    }
                    for file, issues in grouped.items()
                ]
            )
            return

        if not grouped and not result.excluded_warnings:
            ok("No issues found!", use_emoji=ctx.use_emoji)
            return
        table = Table(title="Files with issues (sorted by issue count)", box=box.SIMPLE)
        table.add_column("File", style="bold", overflow="fold")
        table.add_column("Issues", justify="right")
        for file, issues in grouped.items():
            table.add_row(_shorten(file), str(len(issues)))
        console = ctx.stdout()
        console.print(table)
        console.print(f"Total: {len(grouped)} files with {sum(len(issues) for issues in grouped.values())} issues")
        report_excluded(ctx, result.excluded_warnings)


def tally_command(
    source: str = typer.Argument(STDIN_MARKER, metavar="[INPUT]", help="Output file to read, or '-' for stdin."),
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", help="Output format."),
    framework: str = typer.Option("vitest", "--framework", help="Adapter whose parsers read the output."),
) -> None:
    """Count test, type and lint issues per file, highest impact first."""

    with cli_errors():
        ctx = load_cli_context(None)
        adapter = _lookup_adapter(ctx, framework)
        if source == STDIN_MARKER:
            text = typer.get_text_stream("stdin").read()
        else:
            path = Path(source)
            if not path.is_file():
                raise typer.BadParameter(f"Input file not found: {source}", param_hint="INPUT")
            text = path.read_text(encoding="utf-8")

        result = adapter.parse_primary_output(text).merge(parse_validation_sections(text, adapter))
        ranked = sort_by_impact(tally_file_issues(result.errors))

        if output_format is OutputFormat.JSON:
            emit_json([entry.to_payload(file) for file, entry in ranked])
            return

        table = Table(title="Issues by file (sorted by impact)", box=box.SIMPLE)
        table.add_column("File", style="bold", overflow="fold")
        for column in ("Total", "Test", "Type", "Lint"):
            table.add_column(column, justify="right")
        for file, entry in ranked:
            table.add_row(file, str(entry.total), str(entry.test), str(entry.type), str(entry.lint))
        ctx.stdout().print(table)


def register(app: SortedTyper) -> None:
    app.command(name="parse")(parse_command)
    app.command(name="tally")(tally_command)


__all__ = ["parse_command", "parse_saved_output", "register", "tally_command"]
