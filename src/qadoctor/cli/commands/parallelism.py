# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Worker pool sizing command.

The bare worker count is the only thing written to stdout so shell scripts
can capture it directly; the explanatory report goes to stderr.
"""

from __future__ import annotations

import typer

from ...adapters import adapter_by_name
from ...logging import info, section, warn
from ...resources import adjusted_mem_per_worker, calculate_optimal_parallel, detect_resources, parse_mem_reserve
from ..shared import cli_errors, emit_json, load_cli_context
from ..typer_ext import SortedTyper


def parallelism_command(
    mem_per_agent: float | None = typer.Option(
        None,
        "--mem-per-agent",
        help="Memory budget per worker in GB (default from configuration).",
    ),
    mem_reserve: str | None = typer.Option(
        None,
        "--mem-reserve",
        help="Memory kept free: '10%', '500MB', '2GB' or a bare number of GB.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full calculation as JSON."),
    framework: str | None = typer.Option(
        None,
        "--framework",
        help="Scale the per-worker budget by this adapter's resource multiplier.",
    ),
) -> None:
    """Report how many fix workers this machine can run at once."""

    with cli_errors():
        ctx = load_cli_context(None)
        settings = ctx.config.resources
        per_worker = settings.mem_per_worker_gb if mem_per_agent is None else mem_per_agent
        if per_worker <= 0:
            raise typer.BadParameter("must be a positive number", param_hint="--mem-per-agent")
        if framework is not None:
            try:
                adapter = adapter_by_name(framework, ctx.config)
            except KeyError as exc:
                raise typer.BadParameter(f"Unknown framework: {framework}", param_hint="--framework") from exc
            per_worker = adjusted_mem_per_worker(per_worker, adapter)

        snapshot = detect_resources()
        if mem_reserve is None:
            reserve_gb = settings.reserve_gb(snapshot.total_mem_gb)
        else:
            reserve_gb = parse_mem_reserve(mem_reserve, snapshot.total_mem_gb)
        result = calculate_optimal_parallel(snapshot, per_worker, reserve_gb)

    if as_json:
        emit_json(result.to_payload())
        return

    section("Parallelism calculation", use_color=ctx.use_color)
    info(
        f"Memory: {snapshot.available_mem_gb:.1f} GB available of {snapshot.total_mem_gb:.1f} GB "
        f"(reserve {reserve_gb:.1f} GB, {per_worker:.1f} GB per worker)",
        use_emoji=ctx.use_emoji,
    )
    info(f"CPU: {snapshot.cpu_cores} cores, load {snapshot.cpu_load:g}", use_emoji=ctx.use_emoji)
    if result.load_status == "saturated":
        warn("CPU load is saturated; worker count halved", use_emoji=ctx.use_emoji)
    info(f"Max parallel workers: {result.max_parallel} (limited by {result.limiting_factor})", use_emoji=ctx.use_emoji)
    typer.echo(str(result.max_parallel))


def register(app: SortedTyper) -> None:
    app.command(name="parallelism")(parallelism_command)


__all__ = ["parallelism_command", "register"]
